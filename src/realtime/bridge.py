"""Per-session bridge between the client WebSocket and the upstream adapter.

Three tasks run per session:

- client reader: binary frames -> `on_client_frame`
- upstream reader: `adapter.open()` then `adapter.receive()` -> `on_upstream_envelope`
- client writer: drains the outbound fragment queue into the client socket

Whichever side ends first decides the close sequence. A client close tears the
upstream down at once. An upstream close lets queued fragments drain to the
client (bounded by the drain timeout) before the client is closed.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable

from fastapi import WebSocket, WebSocketDisconnect

from src.state.session import Session
from src.state.settings import SessionSettings
from src.state.session_state import SessionState
from src.errors import SIDE_CLIENT, SIDE_UPSTREAM, HANDSHAKE_TIMEOUT, ConnectError, TransportError
from src.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_UPSTREAM_ENDED_REASON,
    WS_CLOSE_UPSTREAM_FAILURE_CODE,
    WS_CLOSE_HANDSHAKE_TIMEOUT_CODE,
)

from .adapter import UpstreamAdapter
from .pending import PendingAudioQueue
from .outbound import OutboundTextQueue
from .envelope import OtherMessage, SetupComplete, UpstreamEnvelope, TranscriptFragment

logger = logging.getLogger(__name__)


class SessionBridge:
    def __init__(
        self,
        ws: WebSocket,
        adapter: UpstreamAdapter,
        settings: SessionSettings,
        *,
        touch: Callable[[], None] | None = None,
    ) -> None:
        self._ws = ws
        self._settings = settings
        self._touch = touch
        self.session = Session(adapter=adapter)
        self._pending = PendingAudioQueue(max_frames=settings.pending_audio_max_frames)
        self._outbound = OutboundTextQueue(settings.outbound_queue_max)
        # Serializes the pre-handshake flush with live forwarding so frames never reorder.
        self._audio_lock = asyncio.Lock()
        self._close_code = WS_CLOSE_NORMAL_CODE
        self._close_reason = WS_CLOSE_UPSTREAM_ENDED_REASON
        adapter.set_on_open(self._on_upstream_open)

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def adapter(self) -> UpstreamAdapter:
        return self.session.adapter

    def set_touch(self, touch: Callable[[], None] | None) -> None:
        self._touch = touch

    def _set_state(self, state: SessionState) -> None:
        if self.session.state is state:
            return
        logger.debug("session %s: %s -> %s", self.session_id, self.session.state.value, state.value)
        self.session.state = state

    def _on_upstream_open(self) -> None:
        if self.session.state is SessionState.CONNECTING:
            self._set_state(SessionState.HANDSHAKE_PENDING)

    async def on_client_frame(self, frame: bytes) -> None:
        stats = self.session.stats
        stats.frames_received += 1
        if self._touch is not None:
            self._touch()
        async with self._audio_lock:
            state = self.session.state
            if state.accepts_pending_audio:
                if not self._pending.push(frame):
                    stats.frames_dropped += 1
                    logger.warning(
                        "session %s: pre-setup audio queue full (%s frames); dropped oldest frame",
                        self.session_id,
                        self._pending.max_frames,
                    )
                return
            if state is SessionState.STREAMING:
                await self.adapter.send_audio(frame)
                stats.frames_forwarded += 1
                return
            stats.frames_discarded += 1

    async def on_upstream_envelope(self, envelope: UpstreamEnvelope) -> None:
        stats = self.session.stats
        if isinstance(envelope, SetupComplete):
            await self._complete_handshake()
            return
        if isinstance(envelope, TranscriptFragment):
            if self.session.state is not SessionState.STREAMING:
                logger.warning("session %s: transcript before setupComplete; dropped", self.session_id)
                return
            if self._outbound.offer(envelope.text):
                return
            stats.fragments_dropped += 1
            logger.warning(
                "session %s: client is not keeping up; dropped transcript fragment (%s dropped so far)",
                self.session_id,
                stats.fragments_dropped,
            )
            return
        if isinstance(envelope, OtherMessage):
            stats.other_messages += 1
            logger.debug("session %s: upstream diagnostic %s", self.session_id, envelope.raw[:200])

    async def _complete_handshake(self) -> None:
        async with self._audio_lock:
            if not self.session.state.accepts_pending_audio:
                logger.debug("session %s: duplicate setupComplete ignored", self.session_id)
                return
            frames = self._pending.drain()
            for frame in frames:
                await self.adapter.send_audio(frame)
                self.session.stats.frames_forwarded += 1
            self._set_state(SessionState.STREAMING)
        if frames:
            logger.info("session %s: flushed %s buffered frames after setup", self.session_id, len(frames))

    async def on_client_close(self) -> None:
        """Client ended: stop reading it and release the upstream at once."""
        if self.session.state is SessionState.CLOSED:
            return
        self._set_state(SessionState.DRAINING)
        self._pending.clear()
        self._outbound.close()
        await self.adapter.close()

    async def on_upstream_close(self) -> None:
        """Upstream ended: stop reading it and let queued fragments reach the client."""
        if self.session.state is SessionState.CLOSED:
            return
        self._set_state(SessionState.DRAINING)
        self._pending.clear()
        await self.adapter.close()
        self._outbound.close()

    async def _client_reader(self) -> None:
        while True:
            message = await self._ws.receive()
            if message.get("type") == "websocket.disconnect":
                return
            frame = message.get("bytes")
            if frame is None:
                # One binary message is one audio frame; text is not part of the protocol.
                if message.get("text") is not None:
                    logger.debug("session %s: ignoring client text message", self.session_id)
                continue
            await self.on_client_frame(frame)

    async def _upstream_reader(self) -> None:
        ack = await self.adapter.open()
        await self.on_upstream_envelope(ack)
        async for envelope in self.adapter.receive():
            await self.on_upstream_envelope(envelope)
        if self.adapter.failure is not None:
            raise self.adapter.failure

    async def _client_writer(self) -> None:
        while True:
            text = await self._outbound.next_text()
            if text is None:
                return
            try:
                await self._ws.send_text(text)
            except Exception as exc:
                raise TransportError(side=SIDE_CLIENT, message=str(exc) or type(exc).__name__) from exc
            self.session.stats.fragments_forwarded += 1
            if self._touch is not None:
                self._touch()

    def _record_upstream_failure(self, exc: BaseException | None) -> None:
        if exc is None:
            return
        if isinstance(exc, ConnectError):
            self._close_code = (
                WS_CLOSE_HANDSHAKE_TIMEOUT_CODE if exc.reason == HANDSHAKE_TIMEOUT else WS_CLOSE_UPSTREAM_FAILURE_CODE
            )
            self._close_reason = exc.reason
            logger.warning("session %s: upstream connect failed: %s", self.session_id, exc)
            return
        if isinstance(exc, TransportError):
            self._close_code = WS_CLOSE_UPSTREAM_FAILURE_CODE
            self._close_reason = "upstream transport failure"
            logger.warning("session %s: %s", self.session_id, exc)
            return
        self._close_code = WS_CLOSE_UPSTREAM_FAILURE_CODE
        self._close_reason = "internal error"
        logger.error("session %s: upstream task failed", self.session_id, exc_info=exc)

    async def run(self) -> None:
        """Drive the session until both sides have closed. Never raises transport errors."""
        logger.info("session %s: started model=%s", self.session_id, self.adapter.model)
        client_task = asyncio.create_task(self._client_reader())
        upstream_task = asyncio.create_task(self._upstream_reader())
        writer_task = asyncio.create_task(self._client_writer())
        try:
            # The writer only finishes early when a client write failed.
            await asyncio.wait({client_task, upstream_task, writer_task}, return_when=asyncio.FIRST_COMPLETED)
            client_exc = _task_exception(client_task)
            upstream_failed = isinstance(client_exc, TransportError) and client_exc.side == SIDE_UPSTREAM
            if upstream_task.done() or upstream_failed:
                await self._finish_upstream_side(client_task, upstream_task, writer_task)
            else:
                await self._finish_client_side(client_task, upstream_task, writer_task)
        finally:
            for task in (client_task, upstream_task, writer_task):
                await _cancel(task)
            await self.adapter.close()
            self._set_state(SessionState.CLOSED)
            logger.info("session %s: closed stats=%s", self.session_id, self.session.stats.as_dict())

    async def _finish_client_side(
        self, client_task: asyncio.Task, upstream_task: asyncio.Task, writer_task: asyncio.Task
    ) -> None:
        writer_exc = _task_exception(writer_task)
        exc = _task_exception(client_task) or writer_exc
        if exc is not None and not isinstance(exc, WebSocketDisconnect):
            logger.warning("session %s: client transport failed: %s", self.session_id, exc)
        else:
            logger.info("session %s: client closed", self.session_id)
        await _cancel(upstream_task)
        await self.on_client_close()
        await _cancel(writer_task)
        if writer_exc is not None:
            # The reader may still be parked on a socket we can no longer write to.
            await _cancel(client_task)
            with contextlib.suppress(Exception):
                await self._ws.close(code=WS_CLOSE_NORMAL_CODE, reason="client write failed")

    async def _finish_upstream_side(
        self, client_task: asyncio.Task, upstream_task: asyncio.Task, writer_task: asyncio.Task
    ) -> None:
        if upstream_task.done():
            self._record_upstream_failure(_task_exception(upstream_task))
        else:
            self._record_upstream_failure(_task_exception(client_task))
            await _cancel(upstream_task)
        await self.on_upstream_close()
        try:
            await asyncio.wait_for(asyncio.shield(writer_task), timeout=self._settings.drain_timeout_s)
        except TimeoutError:
            logger.warning(
                "session %s: drain timed out; %s fragments undelivered", self.session_id, self._outbound.qsize()
            )
        except Exception:
            logger.debug("session %s: client writer ended with error", self.session_id, exc_info=True)
        await _cancel(client_task)
        with contextlib.suppress(Exception):
            await self._ws.close(code=self._close_code, reason=self._close_reason)


def _task_exception(task: asyncio.Task) -> BaseException | None:
    if not task.done() or task.cancelled():
        return None
    return task.exception()


async def _cancel(task: asyncio.Task[Any]) -> None:
    if task.done():
        # Retrieve the result so asyncio does not log "exception was never retrieved".
        if not task.cancelled():
            task.exception()
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


__all__ = ["SessionBridge"]
