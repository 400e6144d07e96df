"""gateway 测试配置 -- FastAPI app + httpx AsyncClient fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from darconsole.core.config import DEFAULT_USERS, ConsoleConfig
from darconsole.core.console import ConsoleStore
from darconsole.core.models import UserRole
from darconsole.core.store import create_store_group
from httpx import ASGITransport, AsyncClient

# 默认用户 id（见 config.DEFAULT_USERS）
ROLE_USER_IDS: dict[UserRole, str] = {
    UserRole(u["role"]): u["id"] for u in DEFAULT_USERS
}


@pytest_asyncio.fixture
async def test_app(tmp_path: Path):
    """创建测试用 FastAPI app（手动初始化，绕过 lifespan）"""
    db_path = str(tmp_path / "sqlite" / "test.db")
    os.environ["DARCONSOLE_DB_PATH"] = db_path
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from darconsole.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    app.state.console = await ConsoleStore.open(store_group.snapshot_store, ConsoleConfig())

    yield app

    await store_group.conn.close()
    os.environ.pop("DARCONSOLE_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def auth() -> dict[UserRole, dict[str, str]]:
    """角色 -> 请求头（X-User-Id）"""
    return {role: {"X-User-Id": user_id} for role, user_id in ROLE_USER_IDS.items()}
