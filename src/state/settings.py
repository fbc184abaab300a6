"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    api_key: str
    base_url: str
    model: str
    handshake_timeout_s: float


@dataclass(frozen=True, slots=True)
class SessionSettings:
    pending_audio_max_frames: int
    outbound_queue_max: int
    drain_timeout_s: float


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    max_connection_duration_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    upstream: UpstreamSettings
    session: SessionSettings
    limits: LimitsSettings
    websocket: WebSocketSettings


__all__ = [
    "AppSettings",
    "LimitsSettings",
    "SessionSettings",
    "UpstreamSettings",
    "WebSocketSettings",
]
