"""配置模块：分层加载环境文件，并以 ``get_settings()`` 缓存唯一的配置对象。

加载顺序（后者覆盖前者）：
1. 进程环境变量；
2. 项目根目录下的 ``.env``（不覆盖已有变量）；
3. ``.env.<ENVIRONMENT>``，``DEBUG`` 打开且未指定环境时视为 ``development``。
设置 ``ENV_FILE`` 时只加载该文件。
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _project_root() -> Path:
    here = Path(__file__).resolve()
    return next((parent for parent in here.parents if (parent / "app").is_dir()), here.parent)


PROJECT_ROOT = _project_root()


def _env_files() -> Iterator[Tuple[Path, bool]]:
    """依次给出 ``(文件路径, 是否覆盖已有变量)``。"""
    explicit = os.getenv("ENV_FILE")
    if explicit:
        yield PROJECT_ROOT / explicit, True
        return

    yield PROJECT_ROOT / ".env", False

    environment = os.getenv("ENVIRONMENT")
    if environment is None and (os.getenv("DEBUG") or "").strip().lower() in _TRUTHY:
        environment = "development"
    if environment:
        name = environment if environment.startswith(".env") else f".env.{environment}"
        yield PROJECT_ROOT / name, True


for _path, _override in _env_files():
    if _path.exists():
        load_dotenv(_path, override=_override, encoding="utf-8")


class Settings(BaseSettings):
    """应用配置，所有字段都可以通过同名大写环境变量覆盖。

    数据库默认指向 PostgreSQL；单机部署或测试可直接用 ``DATABASE_URL`` 指定 SQLite。
    """

    model_config = SettingsConfigDict(extra="ignore")

    project_name: str = Field(default="TIAB Inventory API", alias="PROJECT_NAME")
    api_v1_str: str = Field(default="/api/v1", alias="API_V1_STR")
    debug: bool = Field(default=False, alias="DEBUG")
    app_port: int = Field(default=8000, alias="APP_PORT")
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    # 数据库
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    database_host: str = Field(default="localhost", alias="DATABASE_HOST")
    database_port: int = Field(default=5432, alias="DATABASE_PORT")
    database_user: str = Field(default="postgres", alias="DATABASE_USER")
    database_password: str = Field(default="postgres", alias="DATABASE_PASSWORD")
    database_name: str = Field(default="tiab", alias="DATABASE_NAME")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # 身份令牌（由外部身份服务签发，这里只做校验）
    jwt_secret_key: str = Field(default="changeme", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # 日志
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="log", alias="LOG_DIR")
    log_file_name: str = Field(default="app.log", alias="LOG_FILE_NAME")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # 容器树
    search_page_size: int = Field(default=10, ge=1, alias="SEARCH_PAGE_SIZE")
    max_tree_depth: int = Field(default=64, ge=1, alias="MAX_TREE_DEPTH")

    @property
    def sql_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        credentials = f"{self.database_user}:{self.database_password}"
        location = f"{self.database_host}:{self.database_port}/{self.database_name}"
        return f"postgresql+psycopg2://{credentials}@{location}"

    @property
    def log_directory(self) -> Path:
        """日志目录；相对路径按项目根目录解析。"""
        path = Path(self.log_dir)
        return path if path.is_absolute() else PROJECT_ROOT / path

    @property
    def log_file_path(self) -> Path:
        return self.log_directory / self.log_file_name

    @property
    def timezone_info(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            return ZoneInfo("UTC")


@lru_cache
def get_settings() -> Settings:
    return Settings()
