"""
Request logging middleware.

Measures latency for every request and, once the response has been fully
sent, emits one summary line for requests under the API prefix:

    GET /api/widgets 200 in 3ms :: {"id":1}

The JSON body is captured by ``ResponseObserver``, which taps the outgoing
body stream without altering it.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace

from starlette.background import BackgroundTask, BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from hybridserve.error_handlers import message_of, status_of
from hybridserve.errors import LoggingError
from hybridserve.logging_config import log

logger = logging.getLogger(__name__)


@dataclass
class RequestTrace:
    method: str
    path: str
    start: float = field(default_factory=time.perf_counter)
    status_code: int | None = None
    captured_body: bytes | None = None

    def elapsed_ms(self) -> int:
        return int(round((time.perf_counter() - self.start) * 1000))


def _is_json(content_type: str | None) -> bool:
    media = (content_type or "").split(";", 1)[0].strip().lower()
    return media == "application/json" or media.endswith("+json")


class ResponseObserver:
    """Tap on a response body stream.

    Chunks are yielded unchanged and without delay. When ``capture`` is set
    they are also copied, and the joined bytes land on the trace once the
    stream is exhausted.
    """

    def __init__(self, trace: RequestTrace, *, capture: bool) -> None:
        self.trace = trace
        self.capture = capture
        self._chunks: list[bytes] = []

    async def tap(self, body_iterator: AsyncIterator[bytes | str]) -> AsyncIterator[bytes | str]:
        async for chunk in body_iterator:
            if self.capture:
                self._chunks.append(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
            yield chunk
        if self.capture:
            self.trace.captured_body = b"".join(self._chunks)

    def wrap(self, response: Response) -> Response:
        response.body_iterator = self.tap(response.body_iterator)  # type: ignore[attr-defined]
        return response


def format_line(trace: RequestTrace, elapsed_ms: int) -> str:
    line = f"{trace.method} {trace.path} {trace.status_code} in {elapsed_ms}ms"
    if trace.captured_body:
        try:
            payload = json.loads(trace.captured_body)
            serialized = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise LoggingError(f"unserializable response body: {exc}") from exc
        line += f" :: {serialized}"
    return line


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """One log line per finished API request; silent for everything else."""

    def __init__(self, app: ASGIApp, api_prefix: str = "/api") -> None:
        super().__init__(app)
        self.api_prefix = "/" + api_prefix.strip("/")

    def is_api_path(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(self.api_prefix + "/")

    async def dispatch(self, request: Request, call_next):
        trace = RequestTrace(method=request.method, path=request.url.path)

        try:
            response: Response = await call_next(request)
        except Exception as exc:
            # The catch-all handler renders this further out; log what it will send
            trace.status_code = status_of(exc)
            trace.captured_body = json.dumps(
                {"message": message_of(exc)}, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
            self.emit(trace)
            raise

        trace.status_code = response.status_code
        capture = self.is_api_path(trace.path) and _is_json(
            response.headers.get("content-type")
        )
        ResponseObserver(trace, capture=capture).wrap(response)
        _after_send(response, BackgroundTask(self.finish, trace))
        return response

    async def finish(self, trace: RequestTrace) -> None:
        # Async so it runs on the event loop rather than the threadpool
        self.emit(trace)

    def emit(self, trace: RequestTrace) -> None:
        elapsed = trace.elapsed_ms()
        if not self.is_api_path(trace.path):
            return
        try:
            line = format_line(trace, elapsed)
        except LoggingError as exc:
            logger.warning("request log body dropped for %s %s: %s", trace.method, trace.path, exc)
            line = format_line(replace(trace, captured_body=None), elapsed)
        except Exception:
            logger.warning("request log line failed", exc_info=True)
            return
        log(line)


def _after_send(response: Response, task: BackgroundTask) -> None:
    existing = getattr(response, "background", None)
    if existing is None:
        response.background = task
        return
    response.background = BackgroundTasks(tasks=[existing, task])


__all__ = [
    "RequestTrace",
    "ResponseObserver",
    "RequestLoggerMiddleware",
    "format_line",
]
