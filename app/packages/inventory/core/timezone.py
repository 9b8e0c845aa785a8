"""时区工具方法：序列化容器/物品的审计时间。"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from app.packages.inventory.core.config import get_settings


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """将时间转换到配置时区并输出 ``YYYY-MM-DD HH:MM:SS``。

    SQLite 读回的时间不带时区信息，按 UTC 存储处理。
    """
    if value is None:
        return None
    tz = get_settings().timezone_info
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")
