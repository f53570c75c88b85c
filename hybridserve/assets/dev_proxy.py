from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI, Request
from starlette.background import BackgroundTask
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from hybridserve.application.handle import ServerHandle

logger = logging.getLogger(__name__)

HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)
PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class DevServerStrategy:
    """Development: delegate asset requests to a live dev server.

    Every request no registered route claims is forwarded to
    ``base_url`` (a hot-reloading bundler such as Vite) and the reply is
    streamed back unchanged apart from hop-by-hop headers.
    """

    name = "dev-server"

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def activate(self, app: FastAPI, handle: ServerHandle) -> None:
        url = httpx.URL(self.base_url)
        if url.scheme not in {"http", "https"} or not url.host:
            raise ValueError(f"DEV_SERVER_URL must be an http(s) URL, got {self.base_url!r}")

        self.client = httpx.AsyncClient(
            base_url=url,
            transport=self._transport,
            timeout=self.timeout,
            follow_redirects=False,
        )
        app.state.shutdown_hooks.append(self.client.aclose)
        app.add_api_route(
            "/{full_path:path}",
            self.proxy,
            methods=PROXY_METHODS,
            include_in_schema=False,
        )
        logger.info("Delegating assets to dev server at %s (listener %s)", url, handle.describe())

    async def proxy(self, request: Request) -> Response:
        if self.client is None:
            raise RuntimeError("proxy called before activate()")

        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        headers = [
            (k, v)
            for k, v in request.headers.items()
            if k.lower() not in HOP_BY_HOP and k.lower() != "host"
        ]
        upstream_request = self.client.build_request(
            request.method, target, headers=headers, content=await request.body()
        )
        try:
            upstream = await self.client.send(upstream_request, stream=True)
        except httpx.TransportError as exc:
            logger.warning("Dev server unavailable for %s: %s", target, exc)
            return PlainTextResponse("Dev server unavailable", status_code=502)

        response = StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers = [
            (k, v)
            for k, v in upstream.headers.raw
            if k.decode("latin-1").lower() not in HOP_BY_HOP
        ]
        return response


__all__ = ["DevServerStrategy", "HOP_BY_HOP", "PROXY_METHODS"]
