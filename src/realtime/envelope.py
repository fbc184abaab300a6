"""Gemini Live envelopes: outbound builders and inbound classification."""

from __future__ import annotations

import base64
import logging
from typing import Any, Union
from dataclasses import dataclass

import orjson

from src.errors import MALFORMED_MESSAGE, ProtocolError
from src.config.upstream import (
    UPSTREAM_KEY_DATA,
    UPSTREAM_KEY_TEXT,
    UPSTREAM_KEY_MODEL,
    UPSTREAM_KEY_PARTS,
    UPSTREAM_KEY_SETUP,
    UPSTREAM_KEY_MIME_TYPE,
    UPSTREAM_KEY_MEDIA_CHUNKS,
    UPSTREAM_KEYS_MODEL_TURN,
    UPSTREAM_AUDIO_MIME_TYPE,
    UPSTREAM_KEY_REALTIME_INPUT,
    UPSTREAM_KEYS_SETUP_COMPLETE,
    UPSTREAM_KEYS_SERVER_CONTENT,
    UPSTREAM_RESPONSE_MODALITIES,
    UPSTREAM_KEY_GENERATION_CONFIG,
    UPSTREAM_KEY_RESPONSE_MODALITIES,
    UPSTREAM_KEYS_INPUT_TRANSCRIPTION,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SetupComplete:
    pass


@dataclass(frozen=True, slots=True)
class TranscriptFragment:
    text: str


@dataclass(frozen=True, slots=True)
class OtherMessage:
    """Anything the bridge does not act on: diagnostics, unknown shapes, bad JSON."""

    raw: str


UpstreamEnvelope = Union[SetupComplete, TranscriptFragment, OtherMessage]


def build_setup(model: str, response_modalities: tuple[str, ...] = UPSTREAM_RESPONSE_MODALITIES) -> dict[str, Any]:
    return {
        UPSTREAM_KEY_SETUP: {
            UPSTREAM_KEY_MODEL: model,
            UPSTREAM_KEY_GENERATION_CONFIG: {
                UPSTREAM_KEY_RESPONSE_MODALITIES: list(response_modalities),
            },
        }
    }


def build_audio_chunk(frame: bytes, mime_type: str = UPSTREAM_AUDIO_MIME_TYPE) -> dict[str, Any]:
    return {
        UPSTREAM_KEY_REALTIME_INPUT: {
            UPSTREAM_KEY_MEDIA_CHUNKS: [
                {
                    UPSTREAM_KEY_MIME_TYPE: mime_type,
                    UPSTREAM_KEY_DATA: base64.b64encode(frame).decode("ascii"),
                }
            ]
        }
    }


def encode(envelope: dict[str, Any]) -> str:
    return orjson.dumps(envelope).decode("utf-8")


def _first_key(obj: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in obj:
            return obj[key]
    return None


def _model_turn_text(model_turn: Any) -> str | None:
    if not isinstance(model_turn, dict):
        return None
    parts = model_turn.get(UPSTREAM_KEY_PARTS)
    if not isinstance(parts, list):
        return None
    texts = [p[UPSTREAM_KEY_TEXT] for p in parts if isinstance(p, dict) and isinstance(p.get(UPSTREAM_KEY_TEXT), str)]
    if not texts:
        return None
    return "".join(texts)


def _server_content_text(server_content: Any) -> str | None:
    if not isinstance(server_content, dict):
        return None
    text = _model_turn_text(_first_key(server_content, UPSTREAM_KEYS_MODEL_TURN))
    if text is not None:
        return text
    transcription = _first_key(server_content, UPSTREAM_KEYS_INPUT_TRANSCRIPTION)
    if isinstance(transcription, dict) and isinstance(transcription.get(UPSTREAM_KEY_TEXT), str):
        return transcription[UPSTREAM_KEY_TEXT]
    return None


def parse_envelope(raw: str | bytes) -> UpstreamEnvelope:
    """Classify one inbound upstream message.

    Raises ProtocolError for text that is not a JSON object or has no known
    shape. Use `classify_envelope` to absorb those into `OtherMessage`.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    try:
        msg = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise ProtocolError(reason=MALFORMED_MESSAGE, raw=text) from exc

    if not isinstance(msg, dict):
        raise ProtocolError(reason=MALFORMED_MESSAGE, raw=text)

    if any(key in msg for key in UPSTREAM_KEYS_SETUP_COMPLETE):
        return SetupComplete()

    server_content = _first_key(msg, UPSTREAM_KEYS_SERVER_CONTENT)
    if server_content is not None:
        fragment = _server_content_text(server_content)
        if fragment is not None:
            return TranscriptFragment(text=fragment)
        # turnComplete, interrupted, etc.
        return OtherMessage(raw=text)

    raise ProtocolError(reason=MALFORMED_MESSAGE, raw=text)


def classify_envelope(raw: str | bytes) -> UpstreamEnvelope:
    try:
        return parse_envelope(raw)
    except ProtocolError as exc:
        logger.debug("upstream message not understood: %s", exc)
        return OtherMessage(raw=exc.raw)


__all__ = [
    "OtherMessage",
    "SetupComplete",
    "TranscriptFragment",
    "UpstreamEnvelope",
    "build_audio_chunk",
    "build_setup",
    "classify_envelope",
    "encode",
    "parse_envelope",
]
