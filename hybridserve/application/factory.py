from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hybridserve import __version__
from hybridserve.middleware.loader import register_canonical_middlewares
from hybridserve.settings import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run registered shutdown hooks (dev proxy clients and the like) on exit."""
    try:
        yield
    finally:
        for hook in reversed(app.state.shutdown_hooks):
            try:
                await hook()
            except Exception as exc:
                logger.warning("Shutdown hook %r failed: %s", hook, exc)


def build_application(settings: Settings) -> FastAPI:
    """Assemble the bare FastAPI application.

    Only construction-time wiring happens here (middleware, docs URLs).
    Routes, the terminal error handler and asset serving are installed later,
    exactly once, by the initializer.
    """
    api_prefix = "/" + settings.API_PREFIX.strip("/")
    app = FastAPI(
        title="hybridserve",
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{api_prefix}/docs",
        redoc_url=None,
        openapi_url=f"{api_prefix}/openapi.json",
    )
    app.state.shutdown_hooks = []

    register_canonical_middlewares(app, api_prefix=api_prefix)
    logger.debug("Application composed (api_prefix=%s)", api_prefix)
    return app


__all__ = ["build_application", "lifespan"]
