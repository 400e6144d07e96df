"""异常 -> HTTP 响应映射

所有 ConsoleError 统一转换为 {"error": {"code", "message"}} 结构。
"""

import structlog
from darconsole.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConsoleError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

_STATUS_CODES: dict[type[ConsoleError], int] = {
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    ValidationError: 422,
    PersistenceError: 503,
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def console_error_handler(request: Request, exc: ConsoleError) -> JSONResponse:
    status_code = 400
    for exc_type, code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            status_code = code
            break
    log.info("console_error", code=exc.code, status_code=status_code)
    return error_response(status_code, exc.code, exc.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConsoleError, console_error_handler)
