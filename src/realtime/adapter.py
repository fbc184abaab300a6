"""Adapter between raw audio frames and the Gemini Live WebSocket protocol."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit
from collections.abc import Callable, AsyncIterator

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from src.state.settings import UpstreamSettings
from src.config.upstream import (
    UPSTREAM_ENDPOINT_PATH,
    UPSTREAM_API_KEY_PARAM,
    UPSTREAM_PING_INTERVAL_S,
    UPSTREAM_CLOSE_TIMEOUT_S,
    UPSTREAM_MAX_MESSAGE_BYTES,
)
from src.errors import (
    SIDE_UPSTREAM,
    HANDSHAKE_TIMEOUT,
    TRANSPORT_FAILURE,
    ConnectError,
    TransportError,
)

from .envelope import (
    OtherMessage,
    SetupComplete,
    UpstreamEnvelope,
    encode,
    build_setup,
    build_audio_chunk,
    classify_envelope,
)

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Any]

_SCHEME_MAP = {"https": "wss", "http": "ws"}


def build_upstream_url(base_url: str, api_key: str) -> str:
    """Join the base URL with the pinned BidiGenerateContent path and key."""
    parts = urlsplit(base_url.strip())
    scheme = _SCHEME_MAP.get(parts.scheme, parts.scheme or "wss")
    # Path segments like /v1beta on the base are superseded by the pinned endpoint path.
    query = urlencode({UPSTREAM_API_KEY_PARAM: api_key})
    return urlunsplit((scheme, parts.netloc, UPSTREAM_ENDPOINT_PATH, query, ""))


def _redact(url: str) -> str:
    return url.split("?", 1)[0]


class UpstreamAdapter:
    """One upstream connection for one session.

    The caller must not call `send_audio` before `open` returned: the bridge's
    state machine enforces the setup gate, this class does not re-check it.
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        *,
        connect_fn: ConnectFn | None = None,
        on_open: Callable[[], None] | None = None,
    ) -> None:
        self._settings = settings
        self._connect = connect_fn or websockets.connect
        self._on_open = on_open
        self._ws: Any = None
        self._closed = False
        self.failure: TransportError | None = None

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._closed

    def set_on_open(self, callback: Callable[[], None] | None) -> None:
        self._on_open = callback

    async def open(self) -> SetupComplete:
        """Connect, send setup and wait for setupComplete within the handshake timeout."""
        if self._closed:
            raise ConnectError(reason=TRANSPORT_FAILURE, message="adapter already closed")
        timeout_s = float(self._settings.handshake_timeout_s)
        try:
            return await asyncio.wait_for(self._open_and_handshake(), timeout=timeout_s)
        except TimeoutError as exc:
            await self.close()
            raise ConnectError(
                reason=HANDSHAKE_TIMEOUT,
                message=f"no setupComplete from upstream within {timeout_s:.1f}s",
            ) from exc
        except ConnectError:
            await self.close()
            raise
        except (OSError, WebSocketException) as exc:
            await self.close()
            raise ConnectError(reason=TRANSPORT_FAILURE, message=str(exc) or type(exc).__name__) from exc

    async def _open_and_handshake(self) -> SetupComplete:
        url = build_upstream_url(self._settings.base_url, self._settings.api_key)
        logger.info("upstream: connecting to %s model=%s", _redact(url), self._settings.model)
        self._ws = await self._connect(
            url,
            open_timeout=self._settings.handshake_timeout_s,
            close_timeout=UPSTREAM_CLOSE_TIMEOUT_S,
            ping_interval=UPSTREAM_PING_INTERVAL_S,
            max_size=UPSTREAM_MAX_MESSAGE_BYTES,
        )
        await self._ws.send(encode(build_setup(self._settings.model)))
        if self._on_open is not None:
            self._on_open()

        while True:
            try:
                raw = await self._ws.recv()
            except ConnectionClosed as exc:
                raise ConnectError(
                    reason=TRANSPORT_FAILURE,
                    message=f"upstream closed during handshake code={_close_code(exc)}",
                ) from exc
            envelope = classify_envelope(raw)
            if isinstance(envelope, SetupComplete):
                logger.info("upstream: setup complete")
                return envelope
            # Anything before setupComplete is diagnostic; transcripts must not leak ahead of it.
            logger.debug("upstream: ignoring pre-setup message %r", _preview(envelope))

    async def send_audio(self, frame: bytes) -> None:
        if self._ws is None or self._closed:
            raise TransportError(side=SIDE_UPSTREAM, message="connection is not open")
        try:
            await self._ws.send(encode(build_audio_chunk(frame)))
        except (ConnectionClosed, OSError) as exc:
            raise TransportError(side=SIDE_UPSTREAM, message=str(exc) or type(exc).__name__) from exc

    async def receive(self) -> AsyncIterator[UpstreamEnvelope]:
        """Yield inbound envelopes in order until the upstream closes."""
        if self._ws is None:
            return
        while not self._closed:
            try:
                raw = await self._ws.recv()
            except ConnectionClosedOK:
                logger.info("upstream: closed")
                return
            except ConnectionClosed as exc:
                self.failure = TransportError(side=SIDE_UPSTREAM, message=f"closed code={_close_code(exc)}")
                logger.warning("upstream: connection lost: %s", self.failure)
                return
            except (OSError, WebSocketException) as exc:
                self.failure = TransportError(side=SIDE_UPSTREAM, message=str(exc) or type(exc).__name__)
                logger.warning("upstream: receive failed: %s", self.failure)
                return
            yield classify_envelope(raw)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        ws = self._ws
        if ws is None:
            return
        with contextlib.suppress(Exception):
            await ws.close()
        logger.debug("upstream: transport released")


def _close_code(exc: ConnectionClosed) -> int | None:
    rcvd = getattr(exc, "rcvd", None)
    return getattr(rcvd, "code", None)


def _preview(envelope: UpstreamEnvelope) -> str:
    if isinstance(envelope, OtherMessage):
        return envelope.raw[:200]
    return repr(envelope)


__all__ = ["ConnectFn", "UpstreamAdapter", "build_upstream_url"]
