"""全局 pytest 配置 -- 临时 SQLite 数据库 + 内存快照存储 + 默认用户 fixture"""

import copy
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import aiosqlite
import pytest
import pytest_asyncio
from darconsole.core.config import DEFAULT_USERS
from darconsole.core.models import User, UserRole


class MemorySnapshotStore:
    """SnapshotStore 的内存实现，保存深拷贝以模拟序列化边界"""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = copy.deepcopy(initial or {})
        self.saves: list[str] = []

    async def load(self, key: str) -> Any | None:
        return copy.deepcopy(self.data.get(key))

    async def save(self, key: str, data: Any) -> None:
        self.saves.append(key)
        self.data[key] = copy.deepcopy(data)


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from darconsole.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def memory_store() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture
def users() -> dict[UserRole, User]:
    """默认用户集，按角色索引"""
    return {UserRole(u["role"]): User(**u) for u in DEFAULT_USERS}
