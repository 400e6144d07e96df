"""PersistenceWarningMiddleware

快照保存失败不会让请求失败；本中间件把本次请求期间记录的持久化错误
通过 X-Persistence-Warning 响应头告知调用方。
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


class PersistenceWarningMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        console = getattr(request.app.state, "console", None)
        if console is not None:
            error = console.pop_persistence_error()
            if error is not None:
                response.headers["X-Persistence-Warning"] = f"snapshot {error.key} not saved"
        return response
