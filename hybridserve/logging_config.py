import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "component": getattr(record, "source", None) or record.name,
            "msg": record.getMessage(),
        }
        env = os.getenv("ENV", "").strip()
        if env:
            payload["env"] = env
        if hasattr(record, "meta"):
            payload["meta"] = record.meta
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError):
            # Fallback to plain message if payload has unserialisable types
            return payload["msg"]


class ConsoleFormatter(logging.Formatter):
    """Short human format: ``3:04:05 PM [source] message``."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created)
        hour = stamp.hour % 12 or 12
        clock = f"{hour}:{stamp:%M:%S} {'AM' if stamp.hour < 12 else 'PM'}"
        source = getattr(record, "source", None) or record.name
        line = f"{clock} [{source}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Call once at process startup.
    LOG_LEVEL env var controls verbosity (default INFO).
    LOG_FORMAT env var selects ``console`` (default) or ``json`` output.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "console")).strip().lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if fmt == "json":
        # Production: JSON logging to stderr
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(handler)

    # Reduce third-party verbosity unless LOG_LEVEL is DEBUG
    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def log(message: str, source: str = "http") -> None:
    """Emit an INFO line tagged with ``source`` through ``hybridserve.<source>``."""
    logging.getLogger(f"hybridserve.{source}").info(
        message, extra={"source": source}
    )


__all__ = ["JsonFormatter", "ConsoleFormatter", "configure_logging", "log"]
