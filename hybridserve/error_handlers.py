from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hybridserve.errors import HandlerError

log = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Internal Server Error"


def status_of(exc: Exception) -> int:
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 100 <= value < 600:
            return value
    return 500


def message_of(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if not message and isinstance(exc, StarletteHTTPException):
        detail = exc.detail
        message = detail if isinstance(detail, str) else None
    if not message:
        message = str(exc)
    return message or DEFAULT_MESSAGE


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    """Translate an unhandled error into ``{"message": ...}`` JSON.

    Starlette only invokes this while the response has not started; once
    headers are on the wire the error is re-raised to the server's default
    handling instead of responding twice.
    """
    status = status_of(exc)
    message = message_of(exc)
    if status >= 500:
        log.error(
            "Internal Server Error: %s %s", request.method, request.url.path,
            exc_info=exc,
        )
    else:
        log.debug("%s %s -> %d %s", request.method, request.url.path, status, message)

    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return JSONResponse({"message": message}, status_code=status, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HandlerError, handle_error)
    app.add_exception_handler(StarletteHTTPException, handle_error)
    # Catch-all runs in the outermost server-error layer
    app.add_exception_handler(Exception, handle_error)


__all__ = [
    "handle_error",
    "register_error_handlers",
    "status_of",
    "message_of",
    "DEFAULT_MESSAGE",
]
