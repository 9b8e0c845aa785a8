"""测试夹具：SQLite 测试库、按用例隔离的所有者身份与 HTTP 客户端。"""

import itertools
import os
from pathlib import Path
from typing import Callable, Dict, Iterator

TEST_DB_FILE = Path(__file__).with_name("test.db")

# 配置对象会被缓存，必须在导入应用模块之前写入环境变量
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_FILE}"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.main import app  # noqa: E402
from app.packages.inventory.core.security import create_access_token  # noqa: E402
from app.packages.inventory.db import session as db_session  # noqa: E402
from app.packages.inventory.db.init_db import init_db  # noqa: E402

_owner_sequence = itertools.count(1000)


def auth_headers(owner_id: int) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'owner_id': owner_id})}"}


@pytest.fixture(scope="session", autouse=True)
def sqlite_database() -> Iterator[None]:
    """整个测试会话共用一个 SQLite 文件；用例之间靠不同的 owner_id 隔离。"""
    TEST_DB_FILE.unlink(missing_ok=True)
    engine = db_session.build_engine(os.environ["DATABASE_URL"])
    db_session.engine = engine
    db_session.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    init_db()

    yield

    engine.dispose()
    TEST_DB_FILE.unlink(missing_ok=True)


@pytest.fixture()
def db() -> Iterator[Session]:
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def owner_id() -> int:
    return next(_owner_sequence)


@pytest.fixture()
def other_owner_id() -> int:
    return next(_owner_sequence)


@pytest.fixture()
def headers(owner_id: int) -> Dict[str, str]:
    return auth_headers(owner_id)


@pytest.fixture()
def make_headers() -> Callable[[int], Dict[str, str]]:
    """为任意所有者生成认证头，用于跨所有者隔离的用例。"""
    return auth_headers


@pytest.fixture()
def client() -> Iterator[TestClient]:
    # get_db 通过模块属性读取 SessionLocal，已指向测试库，无需覆盖依赖
    with TestClient(app) as test_client:
        yield test_client
