"""Admission control and per-session buffer limits (env names and defaults only)."""

from __future__ import annotations

# Audio is PCM16 mono at 16kHz; the gateway never resamples.
ASR_SAMPLE_RATE_HZ: int = 16000

ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"
DEFAULT_MAX_CONCURRENT_CONNECTIONS = 100

# Frames received before the upstream acknowledges setup. Oldest frames are
# dropped on overflow.
ENV_SESSION_PENDING_AUDIO_MAX_FRAMES = "SESSION_PENDING_AUDIO_MAX_FRAMES"
DEFAULT_SESSION_PENDING_AUDIO_MAX_FRAMES = 256

# Transcript fragments waiting for the client socket. New fragments are
# dropped (and counted) when the client cannot keep up.
ENV_SESSION_OUTBOUND_QUEUE_MAX = "SESSION_OUTBOUND_QUEUE_MAX"
DEFAULT_SESSION_OUTBOUND_QUEUE_MAX = 64

# How long queued fragments may take to reach the client after upstream ends.
ENV_SESSION_DRAIN_TIMEOUT_S = "SESSION_DRAIN_TIMEOUT_S"
DEFAULT_SESSION_DRAIN_TIMEOUT_S = 2.0

__all__ = [
    "ASR_SAMPLE_RATE_HZ",
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_SESSION_DRAIN_TIMEOUT_S",
    "DEFAULT_SESSION_OUTBOUND_QUEUE_MAX",
    "DEFAULT_SESSION_PENDING_AUDIO_MAX_FRAMES",
    "ENV_MAX_CONCURRENT_CONNECTIONS",
    "ENV_SESSION_DRAIN_TIMEOUT_S",
    "ENV_SESSION_OUTBOUND_QUEUE_MAX",
    "ENV_SESSION_PENDING_AUDIO_MAX_FRAMES",
]
