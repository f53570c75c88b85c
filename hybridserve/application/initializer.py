"""Single-flight application bootstrap.

``LazyInitializer`` is a write-once cell around one ``asyncio.Task``. The
first ``ensure()`` starts the setup coroutine; every later call, concurrent or
not, gets the same task back and therefore the same outcome. A failed task
is never replaced: the process stays poisoned until it is restarted.

``Bootstrap`` is the setup sequence itself:

1. register application routes (``ROUTES`` collaborator)
2. install the terminal error handler
3. select and activate the asset strategy
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI

from hybridserve.application.handle import ServerHandle
from hybridserve.error_handlers import register_error_handlers
from hybridserve.errors import SetupError

logger = logging.getLogger(__name__)

RouteRegistrar = Callable[[FastAPI, ServerHandle], Any]


class LazyInitializer:
    def __init__(self, setup: Callable[[], Awaitable[None]]) -> None:
        self._setup = setup
        self._task: asyncio.Task[None] | None = None

    def ensure(self) -> asyncio.Task[None]:
        """Return the shared setup task, starting it on first call.

        Must be called from a running event loop. No await happens between
        the check and the assignment, so concurrent callers cannot race.
        """
        if self._task is None:
            self._task = asyncio.ensure_future(self._setup())
        return self._task

    async def wait(self) -> None:
        # Shielded: a cancelled caller must not abort the shared setup
        await asyncio.shield(self.ensure())

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def failed(self) -> bool:
        return self.done and not self._task.cancelled() and self._task.exception() is not None

    def exception(self) -> BaseException | None:
        if not self.done or self._task.cancelled():
            return None
        return self._task.exception()


def load_registrar(target: str) -> RouteRegistrar:
    """Resolve a ``"module.path:attribute"`` route registration callable."""
    module_path, _, attr_name = target.partition(":")
    if not module_path or not attr_name:
        raise ValueError(f"Route target must look like 'module:attribute', got {target!r}")
    module = importlib.import_module(module_path)
    try:
        registrar = getattr(module, attr_name)
    except AttributeError:
        logger.error("Attribute '%s' not found in module '%s'", attr_name, module_path)
        raise
    if not callable(registrar):
        raise TypeError(f"Route target {target!r} is not callable")
    return registrar


class Bootstrap:
    def __init__(
        self,
        app: FastAPI,
        handle: ServerHandle,
        *,
        register_routes: RouteRegistrar | str,
        select_strategy: Callable[[], Any],
    ) -> None:
        self.app = app
        self.handle = handle
        self._register_routes = register_routes
        self._select_strategy = select_strategy
        self.strategy = None

    async def run(self) -> None:
        started = time.perf_counter()
        logger.info("🔧 Starting one-time initialization")
        await self._step("routes", self._install_routes)
        await self._step("error_handlers", self._install_error_handlers)
        await self._step("assets", self._activate_assets)
        logger.info(
            "🎉 Initialization complete in %.1fms",
            (time.perf_counter() - started) * 1000,
        )

    async def _step(self, name: str, fn: Callable[[], Awaitable[None]]) -> None:
        try:
            await fn()
        except Exception as exc:
            logger.error("Initialization step '%s' failed: %s", name, exc, exc_info=True)
            raise SetupError(f"initialization failed during {name}: {exc}", step=name) from exc
        logger.debug("✅ %s ready", name)

    async def _install_routes(self) -> None:
        registrar = self._register_routes
        if isinstance(registrar, str):
            registrar = load_registrar(registrar)
        result = registrar(self.app, self.handle)
        if inspect.isawaitable(result):
            await result

    async def _install_error_handlers(self) -> None:
        register_error_handlers(self.app)

    async def _activate_assets(self) -> None:
        # Chosen here, once; never re-evaluated per request
        self.strategy = self._select_strategy()
        await self.strategy.activate(self.app, self.handle)


__all__ = ["LazyInitializer", "Bootstrap", "load_registrar", "RouteRegistrar"]
