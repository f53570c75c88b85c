from __future__ import annotations

import enum
import logging
from collections.abc import Callable

import uvicorn
from starlette.types import ASGIApp

from hybridserve.application.handle import ServerHandle
from hybridserve.application.initializer import LazyInitializer
from hybridserve.logging_config import log

logger = logging.getLogger(__name__)


class ListenerState(str, enum.Enum):
    NOT_STARTED = "not_started"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class PersistentListener:
    """Long-lived server: initialize once, then bind and serve forever.

    Initialization failure is fatal: the error is logged and ``SystemExit(1)``
    is raised before any socket is bound.
    """

    def __init__(
        self,
        app: ASGIApp,
        initializer: LazyInitializer,
        handle: ServerHandle,
        *,
        server_factory: Callable[[uvicorn.Config], uvicorn.Server] = uvicorn.Server,
    ) -> None:
        self.app = app
        self.initializer = initializer
        self.handle = handle
        self.server_factory = server_factory
        self.state = ListenerState.NOT_STARTED

    async def serve(self) -> None:
        self.state = ListenerState.INITIALIZING
        try:
            await self.initializer.wait()
        except Exception as exc:
            self.state = ListenerState.FAILED
            logger.critical("Local init error: %s", exc, exc_info=True)
            raise SystemExit(1) from exc

        config = uvicorn.Config(
            self.app,
            host=self.handle.host,
            port=self.handle.port,
            log_config=None,
        )
        sock = config.bind_socket()
        server = self.server_factory(config)
        self.handle.socket = sock
        # PORT=0 asks the OS for a free port
        self.handle.port = sock.getsockname()[1]
        self.handle.server = server
        self.state = ListenerState.READY
        log(f"Server listening on port {self.handle.port}", source="server")

        try:
            await server.serve(sockets=[sock])
        finally:
            sock.close()


__all__ = ["ListenerState", "PersistentListener"]
