"""Client WebSocket configuration and constants."""

from __future__ import annotations

WS_ENDPOINT_PATH = "/ws/transcribe"

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_MAX_DURATION_CODE = 4003
WS_CLOSE_CONFIG_ERROR_CODE = 4004
WS_CLOSE_HANDSHAKE_TIMEOUT_CODE = 4005
WS_CLOSE_UPSTREAM_FAILURE_CODE = 4006

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_BUSY_REASON = "server at capacity"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration reached"
WS_CLOSE_UPSTREAM_ENDED_REASON = "upstream closed"

# Idle watchdog
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
DEFAULT_WS_IDLE_TIMEOUT_S = 150.0
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
ENV_WS_MAX_CONNECTION_DURATION_S = "WS_MAX_CONNECTION_DURATION_S"
DEFAULT_WS_MAX_CONNECTION_DURATION_S = 3600.0

__all__ = [
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_MAX_CONNECTION_DURATION_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_MAX_CONNECTION_DURATION_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_BUSY_REASON",
    "WS_CLOSE_CONFIG_ERROR_CODE",
    "WS_CLOSE_HANDSHAKE_TIMEOUT_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_UPSTREAM_ENDED_REASON",
    "WS_CLOSE_UPSTREAM_FAILURE_CODE",
    "WS_ENDPOINT_PATH",
]
