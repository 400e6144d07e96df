"""core 测试配置 -- ConsoleStore fixture"""

import pytest_asyncio
from darconsole.core.config import ConsoleConfig
from darconsole.core.console import ConsoleStore


@pytest_asyncio.fixture
async def console(memory_store) -> ConsoleStore:
    """基于内存快照存储、已加载默认用户的 ConsoleStore"""
    return await ConsoleStore.open(memory_store, ConsoleConfig())
