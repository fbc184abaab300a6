"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from src.state import RuntimeDeps
from src.errors import ConfigError
from src.config.websocket import (
    WS_CLOSE_BUSY_CODE,
    WS_CLOSE_BUSY_REASON,
    WS_CLOSE_CONFIG_ERROR_CODE,
)

from .lifecycle import WebSocketLifecycle
from .errors import safe_close, reject_connection

logger = logging.getLogger(__name__)


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> bool:
    if not await runtime_deps.connections.admit(ws):
        logger.warning("WebSocket rejected: at capacity (%s)", runtime_deps.connections.max_connections)
        await reject_connection(ws, close_code=WS_CLOSE_BUSY_CODE, reason=WS_CLOSE_BUSY_REASON)
        return False

    try:
        await ws.accept()
    except Exception:
        with contextlib.suppress(Exception):
            await runtime_deps.connections.release(ws)
        raise
    return True


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    lifecycle: WebSocketLifecycle | None = None
    admitted = False
    session_id: str | None = None
    try:
        if not await _prepare_connection(ws, runtime_deps):
            return
        admitted = True

        try:
            bridge = runtime_deps.coordinator.bind_session(ws)
        except ConfigError as exc:
            logger.error("session refused: %s", exc)
            await safe_close(ws, code=WS_CLOSE_CONFIG_ERROR_CODE, reason=exc.reason)
            return
        session_id = bridge.session_id

        lifecycle = WebSocketLifecycle(ws, runtime_deps.settings.websocket, session_id=session_id)
        bridge.set_touch(lifecycle.touch)
        lifecycle.start()

        logger.info(
            "WebSocket connection accepted session_id=%s. Active: %s",
            session_id,
            runtime_deps.connections.active_count,
        )
        await bridge.run()
    finally:
        if lifecycle is not None:
            with contextlib.suppress(Exception):
                await lifecycle.stop()

        if admitted:
            with contextlib.suppress(Exception):
                await runtime_deps.connections.release(ws)
            logger.info(
                "WebSocket connection closed session_id=%s. Active: %s",
                session_id,
                runtime_deps.connections.active_count,
            )


__all__ = ["handle_websocket_connection"]
