"""Bounded client-bound transcript queue."""

from __future__ import annotations

import asyncio

_CLOSE = object()


class OutboundTextQueue(asyncio.Queue):
    """Queue of transcript fragments waiting for the client socket.

    `offer` never blocks: when the client falls behind, the newest fragment is
    refused and the caller counts the drop.
    """

    def __init__(self, maxsize: int) -> None:
        super().__init__(maxsize=max(1, int(maxsize)))
        self._closing = False

    def offer(self, text: str) -> bool:
        if self._closing:
            return False
        try:
            self.put_nowait(text)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        """Mark the end of the stream; the writer exits after queued fragments."""
        if self._closing:
            return
        self._closing = True
        try:
            self.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            # No room for the sentinel; `next_text` ends once the queue empties.
            pass

    async def next_text(self) -> str | None:
        """Return the next fragment, or None once closed and drained."""
        if self._closing and self.empty():
            return None
        item = await self.get()
        if item is _CLOSE:
            return None
        return item


__all__ = ["OutboundTextQueue"]
