"""依赖注入模块 -- 通过 FastAPI Depends 注入 ConsoleStore 与当前操作者

ConsoleStore 通过 app.state 管理，在 lifespan 中初始化/清理。
操作者身份来自 X-User-Id 请求头（登录接口返回的用户 id），
不是真实认证。
"""

import structlog
from darconsole.core.console import ConsoleStore
from darconsole.core.exceptions import AuthenticationError, NotFoundError
from darconsole.core.models import User
from fastapi import Depends, Header, Request


def get_console(request: Request) -> ConsoleStore:
    """从 app.state 获取 ConsoleStore 实例"""
    return request.app.state.console


async def get_actor(
    x_user_id: str | None = Header(default=None),
    console: ConsoleStore = Depends(get_console),
) -> User:
    """按 X-User-Id 解析当前操作者，缺失或未知时视为未登录

    解析成功后把角色绑定到 structlog contextvars。
    """
    if not x_user_id:
        raise AuthenticationError("missing X-User-Id header")
    try:
        actor = console.get_user(x_user_id)
    except NotFoundError as e:
        raise AuthenticationError("unknown user") from e
    structlog.contextvars.bind_contextvars(actor_role=actor.role.value)
    return actor
