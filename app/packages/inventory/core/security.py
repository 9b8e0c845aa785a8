"""安全模块：签发与解析携带所有者身份的 JWT。

认证流程本身（登录、注册、密码存储）由外部身份服务负责；
本服务只信任令牌中的 ``owner_id`` 声明，并据此限定所有数据访问。
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from .config import get_settings
from .logger import logger


def create_access_token(subject: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """根据传入载荷生成带有过期时间的签名 JWT。"""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = subject.copy()
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """解析 JWT 并在合法时返回其中的业务载荷，否则返回 ``None``。"""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.warning("Failed to decode JWT: %s", exc)
        return None


def extract_owner_id(payload: Dict[str, Any]) -> Optional[int]:
    """从令牌载荷中读取所有者 ID，兼容旧令牌中的 ``user_id`` 字段。"""
    raw = payload.get("owner_id", payload.get("user_id"))
    if raw is None or isinstance(raw, bool):
        return None
    try:
        owner_id = int(raw)
    except (TypeError, ValueError):
        return None
    return owner_id if owner_id > 0 else None
