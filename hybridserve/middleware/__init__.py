from .loader import add_mw, register_canonical_middlewares
from .request_logger import (
    RequestLoggerMiddleware,
    RequestTrace,
    ResponseObserver,
    format_line,
)

__all__ = [
    "add_mw",
    "register_canonical_middlewares",
    "RequestLoggerMiddleware",
    "RequestTrace",
    "ResponseObserver",
    "format_line",
]
