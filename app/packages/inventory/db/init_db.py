"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from app.packages.inventory import models  # noqa: F401 - register tables on Base.metadata
from app.packages.inventory.db import session as db_session
from app.packages.inventory.models.base import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    """确保表结构存在；结构变更通过迁移脚本管理，这里只补齐缺失的表。"""
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("Database tables ensured on %s", db_session.engine.url.render_as_string(hide_password=True))
