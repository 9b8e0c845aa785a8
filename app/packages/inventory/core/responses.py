"""统一响应体：所有接口都返回 ``{"msg", "data", "code"}``。"""

from typing import Any

from app.packages.inventory.core.constants import HTTP_STATUS_OK


def create_response(msg: str, data: Any = None, code: int = HTTP_STATUS_OK) -> dict[str, Any]:
    return {"msg": msg, "data": data, "code": code}
