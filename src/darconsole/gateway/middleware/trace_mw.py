"""TraceMiddleware

为服务请求相关操作绑定 trace_id，贯穿一个请求审批生命周期的日志。
trace_id 取自路径 /api/requests/{request_id}/...。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 不是 request_id 的子路由
_RESERVED = {"import"}


class TraceMiddleware(BaseHTTPMiddleware):
    """服务请求级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        parts = request.url.path.strip("/").split("/")
        if len(parts) >= 3 and parts[:2] == ["api", "requests"] and parts[2] not in _RESERVED:
            structlog.contextvars.bind_contextvars(trace_id=f"trace-{parts[2]}")

        return await call_next(request)
