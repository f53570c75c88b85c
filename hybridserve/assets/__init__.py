"""Asset serving strategies.

Exactly one strategy is active per process, chosen once during
initialization: compiled static assets in production, a live dev server
otherwise.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from fastapi import FastAPI

from hybridserve.application.handle import ServerHandle
from hybridserve.settings import Settings

from .dev_proxy import DevServerStrategy
from .static import StaticAssetStrategy

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetStrategy(Protocol):
    """Serve or delegate static assets."""

    name: str

    async def activate(self, app: FastAPI, handle: ServerHandle) -> None:
        """Attach routes/mounts to ``app``; raising fails initialization."""
        ...


def select_asset_strategy(settings: Settings) -> AssetStrategy:
    if settings.is_production:
        strategy: AssetStrategy = StaticAssetStrategy(settings.PUBLIC_DIR)
    else:
        strategy = DevServerStrategy(settings.DEV_SERVER_URL)
    logger.info("Asset strategy selected: %s (ENV=%s)", strategy.name, settings.ENV)
    return strategy


__all__ = [
    "AssetStrategy",
    "DevServerStrategy",
    "StaticAssetStrategy",
    "select_asset_strategy",
]
