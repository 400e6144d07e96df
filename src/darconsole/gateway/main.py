"""FastAPI 应用主文件

app 创建 + lifespan 管理：SQLite 快照存储初始化/关闭 + ConsoleStore 加载 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from darconsole.core.config import get_db_path, load_console_config
from darconsole.core.console import ConsoleStore
from darconsole.core.store import create_store_group
from fastapi import FastAPI

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.persistence_mw import PersistenceWarningMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import auth, health, projects, requests, users

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时打开快照存储并加载聚合，关闭时写回全部快照并清理连接"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    config = load_console_config()
    app.state.console = await ConsoleStore.open(store_group.snapshot_store, config)
    log.info("console_ready", db_path=get_db_path())

    yield

    console = getattr(app.state, "console", None)
    if console is not None:
        await console.save_all()
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Dar Console Gateway",
        version="0.1.0",
        description="项目进度与服务请求审批控制台 API",
        lifespan=lifespan,
    )

    # 注册中间件（后注册的在外层：Logging -> Trace -> PersistenceWarning）
    app.add_middleware(PersistenceWarningMiddleware)
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire()

    register_exception_handlers(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(projects.router, tags=["projects"])
    app.include_router(requests.router, tags=["requests"])
    app.include_router(users.router, tags=["users"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
