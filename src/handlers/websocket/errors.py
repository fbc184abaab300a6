"""Close helpers for the client WebSocket.

The client protocol carries only transcript text, so failures reach the client
as close codes and reasons rather than JSON error messages.
"""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# RFC 6455 limits the close reason to 123 bytes.
_MAX_CLOSE_REASON_BYTES = 123


def _truncate_reason(reason: str) -> str:
    encoded = (reason or "").encode("utf-8")
    if len(encoded) <= _MAX_CLOSE_REASON_BYTES:
        return reason or ""
    return encoded[:_MAX_CLOSE_REASON_BYTES].decode("utf-8", errors="ignore")


async def safe_close(ws: WebSocket, *, code: int, reason: str = "") -> bool:
    try:
        await ws.close(code=code, reason=_truncate_reason(reason))
    except Exception:
        logger.debug("WebSocket close failed", exc_info=True)
        return False
    return True


async def reject_connection(ws: WebSocket, *, close_code: int, reason: str) -> None:
    # Accept so the browser sees our close code instead of a failed handshake (1006).
    try:
        await ws.accept()
    except Exception:
        return
    with contextlib.suppress(Exception):
        await safe_close(ws, code=close_code, reason=reason)


__all__ = ["reject_connection", "safe_close"]
