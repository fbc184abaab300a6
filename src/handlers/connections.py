"""WebSocket connection admission control."""

from __future__ import annotations

import asyncio
from typing import Any


class ConnectionManager:
    """Cap the number of concurrent transcription sessions.

    Admission happens before the socket is accepted so a full server can
    refuse cheaply; each admitted socket must be released exactly once.
    """

    def __init__(self, *, max_connections: int) -> None:
        self.max_connections = max(1, int(max_connections))
        self._lock = asyncio.Lock()
        self._active: set[int] = set()

    async def admit(self, ws: Any) -> bool:
        key = id(ws)
        async with self._lock:
            if key in self._active:
                return True
            if len(self._active) >= self.max_connections:
                return False
            self._active.add(key)
            return True

    async def release(self, ws: Any) -> None:
        async with self._lock:
            self._active.discard(id(ws))

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def at_capacity(self) -> bool:
        return len(self._active) >= self.max_connections


__all__ = ["ConnectionManager"]
