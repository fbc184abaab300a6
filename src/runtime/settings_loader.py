"""Environment parsing for runtime settings."""

from __future__ import annotations

import os
import logging

from src.config.secrets import ENV_UPSTREAM_API_KEY
from src.state.settings import (
    AppSettings,
    LimitsSettings,
    SessionSettings,
    UpstreamSettings,
    WebSocketSettings,
)
from src.config.upstream import (
    ENV_UPSTREAM_MODEL,
    ENV_UPSTREAM_BASE_URL,
    DEFAULT_UPSTREAM_MODEL,
    DEFAULT_UPSTREAM_BASE_URL,
    ENV_UPSTREAM_HANDSHAKE_TIMEOUT_S,
    DEFAULT_UPSTREAM_HANDSHAKE_TIMEOUT_S,
)
from src.config.websocket import (
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
    ENV_WS_MAX_CONNECTION_DURATION_S,
    DEFAULT_WS_MAX_CONNECTION_DURATION_S,
)
from src.config.limits import (
    ENV_SESSION_DRAIN_TIMEOUT_S,
    ENV_SESSION_OUTBOUND_QUEUE_MAX,
    ENV_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_SESSION_DRAIN_TIMEOUT_S,
    DEFAULT_SESSION_OUTBOUND_QUEUE_MAX,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
    ENV_SESSION_PENDING_AUDIO_MAX_FRAMES,
    DEFAULT_SESSION_PENDING_AUDIO_MAX_FRAMES,
)

logger = logging.getLogger(__name__)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("invalid %s=%r; using default %s", name, raw, default)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("invalid %s=%r; using default %s", name, raw, default)
        return default


def _load_upstream_settings() -> UpstreamSettings:
    handshake_timeout = _float_env(ENV_UPSTREAM_HANDSHAKE_TIMEOUT_S, DEFAULT_UPSTREAM_HANDSHAKE_TIMEOUT_S)
    if handshake_timeout <= 0:
        # An unbounded handshake is never allowed.
        handshake_timeout = DEFAULT_UPSTREAM_HANDSHAKE_TIMEOUT_S
    return UpstreamSettings(
        api_key=(os.getenv(ENV_UPSTREAM_API_KEY) or "").strip(),
        base_url=_str_env(ENV_UPSTREAM_BASE_URL, DEFAULT_UPSTREAM_BASE_URL),
        model=_str_env(ENV_UPSTREAM_MODEL, DEFAULT_UPSTREAM_MODEL),
        handshake_timeout_s=handshake_timeout,
    )


def _load_session_settings() -> SessionSettings:
    return SessionSettings(
        pending_audio_max_frames=max(
            1, _int_env(ENV_SESSION_PENDING_AUDIO_MAX_FRAMES, DEFAULT_SESSION_PENDING_AUDIO_MAX_FRAMES)
        ),
        outbound_queue_max=max(1, _int_env(ENV_SESSION_OUTBOUND_QUEUE_MAX, DEFAULT_SESSION_OUTBOUND_QUEUE_MAX)),
        drain_timeout_s=max(0.0, _float_env(ENV_SESSION_DRAIN_TIMEOUT_S, DEFAULT_SESSION_DRAIN_TIMEOUT_S)),
    )


def _load_limits_settings() -> LimitsSettings:
    max_connections = _int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS)
    return LimitsSettings(max_concurrent_connections=max(1, max_connections))


def _load_websocket_settings() -> WebSocketSettings:
    return WebSocketSettings(
        idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
        watchdog_tick_s=max(0.01, _float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S)),
        max_connection_duration_s=_float_env(ENV_WS_MAX_CONNECTION_DURATION_S, DEFAULT_WS_MAX_CONNECTION_DURATION_S),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        upstream=_load_upstream_settings(),
        session=_load_session_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
    )


__all__ = ["load_settings"]
