"""Upstream (Gemini Live) protocol configuration and constants."""

from __future__ import annotations

from .limits import ASR_SAMPLE_RATE_HZ

ENV_UPSTREAM_BASE_URL = "UPSTREAM_BASE_URL"
DEFAULT_UPSTREAM_BASE_URL = "wss://generativelanguage.googleapis.com"

ENV_UPSTREAM_MODEL = "UPSTREAM_MODEL"
DEFAULT_UPSTREAM_MODEL = "models/gemini-2.0-flash-live-001"
UPSTREAM_MODEL_PREFIX = "models/"

# Bounds connect + setup + setupComplete.
ENV_UPSTREAM_HANDSHAKE_TIMEOUT_S = "UPSTREAM_HANDSHAKE_TIMEOUT_S"
DEFAULT_UPSTREAM_HANDSHAKE_TIMEOUT_S = 10.0

# Pinned protocol revision: v1beta, snake_case outbound keys.
UPSTREAM_ENDPOINT_PATH = "/ws/google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
UPSTREAM_API_KEY_PARAM = "key"

UPSTREAM_AUDIO_MIME_TYPE = f"audio/pcm;rate={ASR_SAMPLE_RATE_HZ}"
UPSTREAM_RESPONSE_MODALITIES: tuple[str, ...] = ("TEXT",)

UPSTREAM_PING_INTERVAL_S = 20.0
UPSTREAM_CLOSE_TIMEOUT_S = 5.0
UPSTREAM_MAX_MESSAGE_BYTES = 16 * 1024 * 1024

# Outbound envelope keys
UPSTREAM_KEY_SETUP = "setup"
UPSTREAM_KEY_MODEL = "model"
UPSTREAM_KEY_GENERATION_CONFIG = "generation_config"
UPSTREAM_KEY_RESPONSE_MODALITIES = "response_modalities"
UPSTREAM_KEY_REALTIME_INPUT = "realtime_input"
UPSTREAM_KEY_MEDIA_CHUNKS = "media_chunks"
UPSTREAM_KEY_MIME_TYPE = "mime_type"
UPSTREAM_KEY_DATA = "data"

# Inbound envelope keys (upstream replies in camelCase; snake_case is accepted too)
UPSTREAM_KEYS_SETUP_COMPLETE = ("setupComplete", "setup_complete")
UPSTREAM_KEYS_SERVER_CONTENT = ("serverContent", "server_content")
UPSTREAM_KEYS_MODEL_TURN = ("modelTurn", "model_turn")
UPSTREAM_KEYS_INPUT_TRANSCRIPTION = ("inputTranscription", "input_transcription")
UPSTREAM_KEY_PARTS = "parts"
UPSTREAM_KEY_TEXT = "text"

__all__ = [
    "DEFAULT_UPSTREAM_BASE_URL",
    "DEFAULT_UPSTREAM_HANDSHAKE_TIMEOUT_S",
    "DEFAULT_UPSTREAM_MODEL",
    "ENV_UPSTREAM_BASE_URL",
    "ENV_UPSTREAM_HANDSHAKE_TIMEOUT_S",
    "ENV_UPSTREAM_MODEL",
    "UPSTREAM_API_KEY_PARAM",
    "UPSTREAM_AUDIO_MIME_TYPE",
    "UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_ENDPOINT_PATH",
    "UPSTREAM_KEYS_INPUT_TRANSCRIPTION",
    "UPSTREAM_KEYS_MODEL_TURN",
    "UPSTREAM_KEYS_SERVER_CONTENT",
    "UPSTREAM_KEYS_SETUP_COMPLETE",
    "UPSTREAM_KEY_DATA",
    "UPSTREAM_KEY_GENERATION_CONFIG",
    "UPSTREAM_KEY_MEDIA_CHUNKS",
    "UPSTREAM_KEY_MIME_TYPE",
    "UPSTREAM_KEY_MODEL",
    "UPSTREAM_KEY_PARTS",
    "UPSTREAM_KEY_REALTIME_INPUT",
    "UPSTREAM_KEY_RESPONSE_MODALITIES",
    "UPSTREAM_KEY_SETUP",
    "UPSTREAM_KEY_TEXT",
    "UPSTREAM_MAX_MESSAGE_BYTES",
    "UPSTREAM_MODEL_PREFIX",
    "UPSTREAM_PING_INTERVAL_S",
    "UPSTREAM_RESPONSE_MODALITIES",
]
