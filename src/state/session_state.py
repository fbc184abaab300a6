"""Session lifecycle states."""

from __future__ import annotations

import enum


class SessionState(enum.Enum):
    CONNECTING = "connecting"
    HANDSHAKE_PENDING = "handshake_pending"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"

    @property
    def accepts_pending_audio(self) -> bool:
        return self in (SessionState.CONNECTING, SessionState.HANDSHAKE_PENDING)


__all__ = ["SessionState"]
