"""LoggingMiddleware

为每个 HTTP 请求生成 request_id，并把操作者 X-User-Id 一并绑定到 structlog
contextvars，使 request_transitioned / task_added 等业务日志都带上操作者。
角色在 deps.get_actor 解析出用户后追加绑定。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

ACTOR_HEADER = "X-User-Id"


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件 -- request_id + 操作者"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())

        structlog.contextvars.clear_contextvars()
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        actor_id = request.headers.get(ACTOR_HEADER)
        if actor_id:
            context["actor_id"] = actor_id
        structlog.contextvars.bind_contextvars(**context)

        log = structlog.get_logger()
        await log.ainfo("request_started")

        response = await call_next(request)

        await log.ainfo("request_completed", status_code=response.status_code)

        response.headers["X-Request-ID"] = request_id
        return response
