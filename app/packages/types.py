"""业务包元数据定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import Logger
from typing import Any, Awaitable, Callable, Dict, Type

from fastapi import APIRouter

ExceptionHandler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class AppPackage:
    """业务包交给主应用装配的内容：路由、配置、日志、建表入口与异常处理器。"""

    name: str
    api_router: APIRouter
    get_settings: Callable[[], Any]
    setup_logging: Callable[[], None]
    logger: Logger
    init_db: Callable[[], None]
    create_response: Callable[..., dict]
    exception_handlers: Dict[Type[Exception], ExceptionHandler] = field(default_factory=dict)
