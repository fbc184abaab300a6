"""Bounded pre-handshake audio buffer."""

from __future__ import annotations

from collections import deque


class PendingAudioQueue:
    """Hold client frames until the upstream acknowledges setup.

    Drop-oldest on overflow. Arrival order is kept for everything still queued.
    """

    def __init__(self, *, max_frames: int) -> None:
        self.max_frames = max(1, int(max_frames))
        self._frames: deque[bytes] = deque()

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, frame: bytes) -> bool:
        """Queue a frame; return False when an older frame had to be dropped."""
        full = len(self._frames) >= self.max_frames
        if full:
            self._frames.popleft()
        self._frames.append(frame)
        return not full

    def drain(self) -> list[bytes]:
        frames = list(self._frames)
        self._frames.clear()
        return frames

    def clear(self) -> None:
        self._frames.clear()


__all__ = ["PendingAudioQueue"]
