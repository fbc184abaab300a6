from __future__ import annotations

import asyncio

import pytest

from src.runtime.dependencies import build_runtime_deps
from src.handlers.websocket.manager import handle_websocket_connection
from src.state.settings import AppSettings, LimitsSettings, WebSocketSettings
from src.config.websocket import WS_CLOSE_BUSY_CODE, WS_CLOSE_NORMAL_CODE, WS_CLOSE_CONFIG_ERROR_CODE

from tests.unit.fakes import (
    SETUP_COMPLETE,
    FakeUpstream,
    FakeConnector,
    FakeClientWebSocket,
    fragment,
    wait_until,
    session_settings,
    upstream_settings,
)


def _settings(*, api_key: str = "test-key", max_connections: int = 4) -> AppSettings:
    return AppSettings(
        upstream=upstream_settings(api_key=api_key),
        session=session_settings(),
        limits=LimitsSettings(max_concurrent_connections=max_connections),
        websocket=WebSocketSettings(idle_timeout_s=30.0, watchdog_tick_s=0.05, max_connection_duration_s=60.0),
    )


@pytest.mark.asyncio
async def test_session_relays_audio_and_transcripts() -> None:
    upstream = FakeUpstream()
    deps = build_runtime_deps(_settings(), connect_fn=FakeConnector(upstream))
    client = FakeClientWebSocket()
    client.send_frame(b"\x00\x01")

    task = asyncio.create_task(handle_websocket_connection(client, deps))
    await asyncio.wait_for(upstream.setup_received.wait(), timeout=1.0)
    upstream.push(SETUP_COMPLETE)
    await wait_until(lambda: upstream.audio_frames == [b"\x00\x01"])
    assert deps.connections.active_count == 1

    upstream.push(fragment("hello"))
    await wait_until(lambda: client.sent_text == ["hello"])
    upstream.end()
    await asyncio.wait_for(task, timeout=1.0)

    assert client.accepted
    assert client.close_code == WS_CLOSE_NORMAL_CODE
    assert deps.connections.active_count == 0


@pytest.mark.asyncio
async def test_missing_credential_closes_with_config_error() -> None:
    connector = FakeConnector()
    deps = build_runtime_deps(_settings(api_key=""), connect_fn=connector)
    client = FakeClientWebSocket()

    await asyncio.wait_for(handle_websocket_connection(client, deps), timeout=1.0)

    assert client.accepted
    assert client.close_code == WS_CLOSE_CONFIG_ERROR_CODE
    assert client.close_reason == "missing_credential"
    assert connector.calls == []
    assert deps.connections.active_count == 0


@pytest.mark.asyncio
async def test_connection_over_capacity_is_rejected() -> None:
    deps = build_runtime_deps(_settings(max_connections=1), connect_fn=FakeConnector())
    holder = object()
    assert await deps.connections.admit(holder)
    client = FakeClientWebSocket()

    await asyncio.wait_for(handle_websocket_connection(client, deps), timeout=1.0)

    assert client.close_code == WS_CLOSE_BUSY_CODE
    assert deps.connections.active_count == 1
