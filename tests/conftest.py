"""Test-specific fixtures."""

import asyncio

import httpx
import pytest
from httpx import ASGITransport

from hybridserve.settings import Settings

_ENV_KEYS = (
    "ENV",
    "HOST",
    "PORT",
    "VERCEL",
    "PUBLIC_DIR",
    "DEV_SERVER_URL",
    "API_PREFIX",
    "ROUTES",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Start every test from an empty configuration environment.

    Settings are read from the process environment, so anything exported in
    the developer's shell would otherwise leak into assertions.
    """
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def public_dir(tmp_path):
    """A compiled asset directory with an entry document and one asset."""
    root = tmp_path / "public"
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_text("<!doctype html><div id=root></div>")
    (root / "assets" / "app.js").write_text("console.log('app')")
    return root


@pytest.fixture
def prod_settings(public_dir):
    return Settings(ENV="production", PUBLIC_DIR=str(public_dir), HOST="127.0.0.1", PORT=0)


@pytest.fixture
def dev_settings():
    return Settings(ENV="development", DEV_SERVER_URL="http://vite.test:5173", HOST="127.0.0.1", PORT=0)


class CountingRegistrar:
    """Route registration collaborator that records how often it ran."""

    def __init__(self, *, delay: float = 0.0, error: Exception | None = None):
        self.calls = 0
        self.delay = delay
        self.error = error

    async def __call__(self, app, handle):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        from hybridserve.errors import HandlerError

        @app.get("/api/widgets")
        async def widgets():
            return {"id": 1}

        @app.get("/api/missing")
        async def missing():
            raise HandlerError("not found", status=404)


@pytest.fixture
def make_registrar():
    return CountingRegistrar


@pytest.fixture
def registrar(make_registrar):
    return make_registrar()


@pytest.fixture
def asgi_client():
    """Factory for an in-process httpx client bound to an ASGI app."""

    def _client(app, *, raise_app_exceptions: bool = True) -> httpx.AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return httpx.AsyncClient(transport=transport, base_url="http://testserver")

    return _client
