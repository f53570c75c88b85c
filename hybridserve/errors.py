from __future__ import annotations


class SetupError(RuntimeError):
    """One-time initialization failed.

    Raised by the initializer for any failure in route registration, error
    handler installation or asset strategy activation. ``step`` names the
    stage that failed.
    """

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step


class HandlerError(Exception):
    """Application error carrying the status code the client should see."""

    def __init__(self, message: str = "", status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class LoggingError(Exception):
    """A captured response body could not be turned into a log line."""


__all__ = ["SetupError", "HandlerError", "LoggingError"]
