"""Per-session binding of a client socket to a fresh upstream adapter."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable

from fastapi import WebSocket

from src.errors import MISSING_CREDENTIAL, ConfigError
from src.config.secrets import ENV_UPSTREAM_API_KEY
from src.config.upstream import UPSTREAM_MODEL_PREFIX
from src.state.settings import SessionSettings, UpstreamSettings

from .bridge import SessionBridge
from .adapter import ConnectFn, UpstreamAdapter

logger = logging.getLogger(__name__)


def normalize_model_name(model: str) -> str:
    model = (model or "").strip()
    if not model or model.startswith(UPSTREAM_MODEL_PREFIX):
        return model
    return f"{UPSTREAM_MODEL_PREFIX}{model}"


class TranscriptionCoordinator:
    """Validate configuration and wire one bridge + adapter per client session.

    Never touches the network itself: the adapter connects when the bridge runs.
    """

    def __init__(
        self,
        upstream: UpstreamSettings,
        session: SessionSettings,
        *,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self._upstream = upstream
        self._session = session
        self._connect_fn = connect_fn
        self._model = normalize_model_name(upstream.model)

    @property
    def model(self) -> str:
        return self._model

    @property
    def has_credential(self) -> bool:
        return bool((self._upstream.api_key or "").strip())

    def _adapter_settings(self) -> UpstreamSettings:
        return UpstreamSettings(
            api_key=self._upstream.api_key.strip(),
            base_url=self._upstream.base_url,
            model=self._model,
            handshake_timeout_s=self._upstream.handshake_timeout_s,
        )

    def bind_session(self, ws: WebSocket | Any, *, touch: Callable[[], None] | None = None) -> SessionBridge:
        if not self.has_credential:
            raise ConfigError(
                reason=MISSING_CREDENTIAL,
                message=f"Upstream API key not configured. Set {ENV_UPSTREAM_API_KEY} before starting the gateway.",
            )
        adapter = UpstreamAdapter(self._adapter_settings(), connect_fn=self._connect_fn)
        bridge = SessionBridge(ws, adapter, self._session, touch=touch)
        logger.debug("session %s: bound to model %s", bridge.session_id, self._model)
        return bridge


__all__ = ["TranscriptionCoordinator", "normalize_model_name"]
