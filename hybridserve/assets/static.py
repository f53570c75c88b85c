from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse, PlainTextResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Receive, Scope, Send

from hybridserve.application.handle import ServerHandle

logger = logging.getLogger(__name__)

ENTRY_DOCUMENT = "index.html"


class EntryDocumentResponse(FileResponse):
    """Serve the SPA entry document; answer a plain 500 if it can't be sent."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = False

        async def _send(message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await super().__call__(scope, receive, _send)
        except (OSError, RuntimeError) as exc:
            logger.error("Error sending %s: %s", self.path, exc)
            if started:
                raise
            await PlainTextResponse("Server error", status_code=500)(scope, receive, send)


class SPAStaticFiles(StaticFiles):
    """Compiled asset directory with a client-side routing fallback.

    Existing files are served as-is; any other GET/HEAD request receives the
    entry document with status 200.
    """

    def __init__(self, *, directory: str | Path, entry: str = ENTRY_DOCUMENT) -> None:
        super().__init__(directory=directory, html=False, check_dir=False)
        self.entry_path = Path(directory) / entry

    async def check_config(self) -> None:
        # A missing build directory degrades to the 500 fallback, not a crash
        try:
            await super().check_config()
        except RuntimeError as exc:
            logger.warning("%s", exc)

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
        return EntryDocumentResponse(self.entry_path)


class StaticAssetStrategy:
    """Production: serve the compiled bundle and fall back to the entry document."""

    name = "static"

    def __init__(self, public_dir: str | Path, *, entry: str = ENTRY_DOCUMENT) -> None:
        self.public_dir = Path(public_dir)
        self.entry = entry

    async def activate(self, app: FastAPI, handle: ServerHandle) -> None:
        if not self.public_dir.is_dir():
            logger.warning(
                "Could not find the build directory %s; pages will answer 500",
                self.public_dir.resolve(),
            )
        # Mounted last so every registered route takes precedence
        app.mount(
            "/",
            SPAStaticFiles(directory=self.public_dir, entry=self.entry),
            name="static",
        )
        logger.info("Serving static assets from %s", self.public_dir)


__all__ = [
    "ENTRY_DOCUMENT",
    "EntryDocumentResponse",
    "SPAStaticFiles",
    "StaticAssetStrategy",
]
