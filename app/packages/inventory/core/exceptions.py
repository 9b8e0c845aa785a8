"""异常处理模块：定义统一的业务异常与响应格式。

目录树核心抛出的异常均派生自 ``AppException``，由全局处理器统一转换为
``{"msg", "data", "code"}`` 结构；存储层的瞬时错误不做包装，原样向上抛出。
"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.packages.inventory.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_INTERNAL_SERVER_ERROR,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_PRECONDITION_FAILED,
)
from app.packages.inventory.core.logger import logger
from app.packages.inventory.core.responses import create_response


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = HTTP_STATUS_BAD_REQUEST, data: Any = None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.msg = msg
        self.data = data


class NotFoundError(AppException):
    """引用的容器或物品不存在（或不属于当前所有者）。"""

    def __init__(self, msg: str = "记录不存在或已删除", data: Any = None) -> None:
        super().__init__(msg, HTTP_STATUS_NOT_FOUND, data)


class ConflictError(AppException):
    """同一 (path, parent, owner) 槽位的并发创建或命名冲突。"""

    def __init__(self, msg: str = "记录已存在", data: Any = None) -> None:
        super().__init__(msg, HTTP_STATUS_CONFLICT, data)


class PreconditionError(AppException):
    """操作前置条件不满足，例如删除非空容器却未给出目标路径。"""

    def __init__(self, msg: str, data: Any = None) -> None:
        super().__init__(msg, HTTP_STATUS_PRECONDITION_FAILED, data)


class InvalidOperationError(PreconditionError):
    """结构上不允许的操作：删除虚拟根、把容器移动到自身之下等。"""


class ValidationError(AppException):
    def __init__(self, msg: str, data: Any = None) -> None:
        super().__init__(msg, HTTP_STATUS_BAD_REQUEST, data)


class TreeIntegrityError(AppException):
    """父子链超出深度上限，通常意味着数据中出现了环。"""

    def __init__(self, msg: str = "容器层级超出上限，数据可能存在环", data: Any = None) -> None:
        super().__init__(msg, HTTP_STATUS_INTERNAL_SERVER_ERROR, data)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    if exc.status_code >= HTTP_STATUS_INTERNAL_SERVER_ERROR:
        logger.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    payload = create_response(exc.detail, jsonable_encoder(getattr(exc, "data", None)), exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # pragma: no cover - framework glue
    """请求参数校验失败：错误明细放在 ``data`` 中返回。"""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": str(error.get("msg")), "type": error.get("type")}
        for error in exc.errors()
    ]
    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(status_code=code, content=create_response("请求参数验证失败", errors, code))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=create_response("服务器内部错误", None, code))
