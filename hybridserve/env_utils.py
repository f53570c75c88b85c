import logging
import os
from pathlib import Path

from dotenv import dotenv_values

_logger = logging.getLogger(__name__)

_loaded_once: bool = False


def _env_files() -> list[Path]:
    # Resolved per call so the working directory at load time wins
    return [Path(".env").resolve(), Path(".env.local").resolve()]


def load_env(force: bool | int | str = False) -> int:
    """Load ``.env`` files into ``os.environ`` without clobbering.

    Precedence (highest → lowest):
    - variables already present in the process environment
    - .env
    - .env.local

    Files are read once per process unless ``force`` is truthy. Parsing is
    handled by python-dotenv; quoted values and comments are supported.
    Returns the number of keys that were filled in.
    """
    global _loaded_once

    _force = str(force).lower() in {"1", "true", "yes", "on"}
    if _loaded_once and not _force:
        return 0

    filled = 0
    for path in _env_files():
        if not path.is_file():
            continue
        for k, v in (dotenv_values(path) or {}).items():
            if not k or v is None:
                continue
            # Programmatic overrides (platform env, monkeypatch) take precedence
            if k in os.environ:
                continue
            os.environ[str(k)] = str(v)
            filled += 1

    _loaded_once = True
    if filled:
        _logger.info("env_loader: filled %d missing keys from env files", filled)
    return filled


__all__ = ["load_env"]
