"""Per-connection WebSocket lifecycle helpers (idle and max-duration enforcement)."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from typing import Any

from src.state.settings import WebSocketSettings
from src.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    WS_CLOSE_MAX_DURATION_CODE,
    WS_CLOSE_MAX_DURATION_REASON,
)

logger = logging.getLogger(__name__)


class WebSocketLifecycle:
    """Close the client socket when it goes quiet or outlives its budget.

    The bridge calls `touch` on every audio frame and every delivered
    fragment. Closing the client socket ends the session through the normal
    client-close path, which also releases the upstream connection.
    """

    def __init__(self, websocket: Any, settings: WebSocketSettings, *, session_id: str | None = None) -> None:
        self._ws = websocket
        self._idle_timeout_s = float(settings.idle_timeout_s)
        self._watchdog_tick_s = float(settings.watchdog_tick_s)
        self._max_connection_duration_s = float(settings.max_connection_duration_s)
        self.session_id = session_id
        self._connection_start = time.monotonic()
        self._last_activity = time.monotonic()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.close_code: int | None = None

    def touch(self) -> None:
        self._last_activity = time.monotonic()

    def should_close(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._task
        self._task = None

    async def _close(self, code: int, reason: str) -> None:
        self.close_code = code
        self._stop_event.set()
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason=reason)

    def _expired(self) -> bool:
        if self._max_connection_duration_s <= 0:
            return False
        return (time.monotonic() - self._connection_start) >= self._max_connection_duration_s

    def _idle(self) -> bool:
        if self._idle_timeout_s <= 0:
            return False
        return (time.monotonic() - self._last_activity) >= self._idle_timeout_s

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                if self._expired():
                    logger.info("session %s: max duration reached; closing client", self.session_id)
                    await self._close(WS_CLOSE_MAX_DURATION_CODE, WS_CLOSE_MAX_DURATION_REASON)
                    break
                if self._idle():
                    logger.info("session %s: idle timeout reached; closing client", self.session_id)
                    await self._close(WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON)
                    break
        except asyncio.CancelledError:
            return


__all__ = ["WebSocketLifecycle"]
