"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。"""

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.packages.inventory.core.constants import ACCESS_TOKEN_TYPE, HTTP_STATUS_UNAUTHORIZED
from app.packages.inventory.core.security import decode_token, extract_owner_id
from app.packages.inventory.db import session as db_session

security_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """生成一个数据库会话，并在请求结束后自动关闭。"""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_owner_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> int:
    """解析 ``Authorization`` 头部并返回所有者 ID，缺失或非法时抛出 401。"""
    if not credentials:
        raise HTTPException(status_code=HTTP_STATUS_UNAUTHORIZED, detail="缺少认证信息")

    if credentials.scheme.lower() != ACCESS_TOKEN_TYPE:
        raise HTTPException(status_code=HTTP_STATUS_UNAUTHORIZED, detail="认证类型无效")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=HTTP_STATUS_UNAUTHORIZED, detail="Token 无效或已过期")

    owner_id = extract_owner_id(payload)
    if owner_id is None:
        raise HTTPException(status_code=HTTP_STATUS_UNAUTHORIZED, detail="Token 无效")
    return owner_id
