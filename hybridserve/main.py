"""Process entrypoint and composition root.

Builds the FastAPI application, the server handle and the single-flight
initializer, and injects the same initializer into both dispatch fronts:

- ``hybridserve.main:app`` is the per-invocation ASGI handler that serverless
  platforms import;
- ``python -m hybridserve`` runs the persistent listener, unless the
  serverless marker (``VERCEL``) is set.

The runtime is created lazily so importing this module stays cheap.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI

from hybridserve.application import (
    Bootstrap,
    LazyInitializer,
    ServerHandle,
    build_application,
)
from hybridserve.application.initializer import RouteRegistrar
from hybridserve.assets import AssetStrategy, select_asset_strategy
from hybridserve.dispatch import InvocationHandler, PersistentListener
from hybridserve.env_utils import load_env
from hybridserve.logging_config import configure_logging
from hybridserve.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    app: FastAPI
    handle: ServerHandle
    bootstrap: Bootstrap
    initializer: LazyInitializer
    handler: InvocationHandler
    listener: PersistentListener


def create_runtime(
    settings: Settings | None = None,
    *,
    register_routes: RouteRegistrar | str | None = None,
    select_strategy: Callable[[], AssetStrategy] | None = None,
) -> Runtime:
    """Composition root. Nothing is initialized until a front awaits it."""
    settings = settings or load_settings()
    app = build_application(settings)
    handle = ServerHandle(host=settings.HOST, port=settings.PORT)
    bootstrap = Bootstrap(
        app,
        handle,
        register_routes=register_routes or settings.ROUTES,
        select_strategy=select_strategy or (lambda: select_asset_strategy(settings)),
    )
    initializer = LazyInitializer(bootstrap.run)
    return Runtime(
        settings=settings,
        app=app,
        handle=handle,
        bootstrap=bootstrap,
        initializer=initializer,
        handler=InvocationHandler(app, initializer),
        listener=PersistentListener(app, initializer, handle),
    )


_runtime: Runtime | None = None


def get_runtime() -> Runtime:
    """Get the process runtime, creating it lazily if needed."""
    global _runtime
    if _runtime is None:
        load_env()
        configure_logging()
        _runtime = create_runtime()
    return _runtime


class _LazyHandler:
    """ASGI callable resolving the process runtime on first invocation."""

    async def __call__(self, scope, receive, send):
        await get_runtime().handler(scope, receive, send)

    def __getattr__(self, name: str) -> Any:
        return getattr(get_runtime().app, name)

    def __repr__(self) -> str:
        if _runtime is None:
            return "<LazyHandler: not yet created>"
        return f"<LazyHandler: {_runtime.app!r}>"


app = _LazyHandler()
handler = app


def main() -> None:
    runtime = get_runtime()
    if runtime.settings.is_serverless:
        logger.info("Serverless marker set; not binding a socket")
        return
    asyncio.run(runtime.listener.serve())


if __name__ == "__main__":
    main()


__all__ = ["Runtime", "create_runtime", "get_runtime", "app", "handler", "main"]
