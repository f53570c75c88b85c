from __future__ import annotations

import logging

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from hybridserve.application.initializer import LazyInitializer

logger = logging.getLogger(__name__)

INIT_FAILED_MESSAGE = "Server initialization failed"


class InvocationHandler:
    """ASGI entry point for serverless platforms.

    Each invocation awaits the shared initializer, then hands the untouched
    ``(scope, receive, send)`` triple to the application. When initialization
    failed (now or in an earlier invocation) the client gets a short 500 and
    nothing is retried.
    """

    def __init__(self, app: ASGIApp, initializer: LazyInitializer) -> None:
        self.app = app
        self.initializer = initializer

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.initializer.wait()
        except Exception as exc:
            logger.error("Initialization error: %s", exc)
            await self._init_failed(scope, receive, send)
            return
        await self.app(scope, receive, send)

    async def _init_failed(self, scope: Scope, receive: Receive, send: Send) -> None:
        kind = scope["type"]
        if kind == "http":
            response = PlainTextResponse(INIT_FAILED_MESSAGE, status_code=500)
            await response(scope, receive, send)
        elif kind == "websocket":
            await send({"type": "websocket.close", "code": 1011, "reason": INIT_FAILED_MESSAGE})
        elif kind == "lifespan":
            while True:
                message = await receive()
                if message["type"] == "lifespan.startup":
                    await send({"type": "lifespan.startup.failed", "message": INIT_FAILED_MESSAGE})
                    return
                if message["type"] == "lifespan.shutdown":
                    await send({"type": "lifespan.shutdown.complete"})
                    return


__all__ = ["InvocationHandler", "INIT_FAILED_MESSAGE"]
