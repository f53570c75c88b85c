"""
Deterministic middleware loader with validation.

Wraps ``app.add_middleware`` so that a bad middleware class fails loudly while
the application is being composed instead of on the first request.
"""

import inspect
import logging

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from .request_logger import RequestLoggerMiddleware

logger = logging.getLogger(__name__)


def add_mw(
    app,
    mw_cls: type[BaseHTTPMiddleware],
    *,
    name: str,
    **kwargs,
):
    """
    Add middleware with validation - fails loudly on startup if anything is wrong.

    Args:
        app: FastAPI/Starlette app instance
        mw_cls: Middleware class to add
        name: Human-readable name for error messages

    Raises:
        RuntimeError: If middleware class is invalid
    """
    if mw_cls is None:
        raise RuntimeError(
            f"Middleware '{name}' resolved to None - check imports in hybridserve.middleware"
        )

    if not inspect.isclass(mw_cls):
        raise RuntimeError(f"Middleware '{name}' is not a class: {mw_cls!r}")

    if not issubclass(mw_cls, BaseHTTPMiddleware):
        raise RuntimeError(
            f"Middleware '{name}' must subclass BaseHTTPMiddleware (got {mw_cls})"
        )

    app.add_middleware(mw_cls, **kwargs)
    logger.debug("Added middleware: %s (%s)", name, mw_cls.__name__)


def register_canonical_middlewares(app: FastAPI, *, api_prefix: str = "/api") -> None:
    """
    Register middlewares in canonical order.

    This is the ONLY place where middleware should be registered. It runs at
    composition time, before the application serves anything.
    """
    add_mw(app, RequestLoggerMiddleware, name="request_logger", api_prefix=api_prefix)


__all__ = ["add_mw", "register_canonical_middlewares"]
