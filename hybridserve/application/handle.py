from __future__ import annotations

import socket
from dataclasses import dataclass

import uvicorn


@dataclass
class ServerHandle:
    """The network listener handed to setup collaborators.

    ``socket`` and ``server`` are filled in by the persistent listener once
    initialization has succeeded; in invocation mode they stay ``None``.
    """

    host: str = "0.0.0.0"
    port: int = 5000
    socket: socket.socket | None = None
    server: uvicorn.Server | None = None

    @property
    def bound(self) -> bool:
        return self.socket is not None

    def describe(self) -> str:
        return f"{self.host}:{self.port}" if self.bound else "unbound"


__all__ = ["ServerHandle"]
