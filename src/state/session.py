"""Per-session state owned by the session bridge."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .session_state import SessionState

if TYPE_CHECKING:
    from src.realtime.adapter import UpstreamAdapter


def new_session_id() -> str:
    return f"sess_{uuid.uuid4().hex[:12]}"


@dataclass(slots=True)
class SessionStats:
    frames_received: int = 0
    frames_forwarded: int = 0
    frames_dropped: int = 0
    frames_discarded: int = 0
    fragments_forwarded: int = 0
    fragments_dropped: int = 0
    other_messages: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "frames_received": self.frames_received,
            "frames_forwarded": self.frames_forwarded,
            "frames_dropped": self.frames_dropped,
            "frames_discarded": self.frames_discarded,
            "fragments_forwarded": self.fragments_forwarded,
            "fragments_dropped": self.fragments_dropped,
            "other_messages": self.other_messages,
        }


@dataclass(slots=True)
class Session:
    adapter: UpstreamAdapter
    session_id: str = field(default_factory=new_session_id)
    created_at: float = field(default_factory=time.time)
    state: SessionState = SessionState.CONNECTING
    stats: SessionStats = field(default_factory=SessionStats)


__all__ = ["Session", "SessionStats", "new_session_id"]
