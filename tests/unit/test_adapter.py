from __future__ import annotations

import asyncio

import pytest

from src.realtime.adapter import UpstreamAdapter, build_upstream_url
from src.realtime.envelope import OtherMessage, SetupComplete, TranscriptFragment
from src.errors import SIDE_UPSTREAM, HANDSHAKE_TIMEOUT, TRANSPORT_FAILURE, ConnectError, TransportError

from tests.unit.fakes import SETUP_COMPLETE, FakeUpstream, FakeConnector, fragment, upstream_settings


async def _collect(adapter: UpstreamAdapter) -> list:
    return [envelope async for envelope in adapter.receive()]


def test_upstream_url_uses_pinned_endpoint_and_key() -> None:
    url = build_upstream_url("wss://generativelanguage.googleapis.com", "abc")
    assert url == (
        "wss://generativelanguage.googleapis.com/ws/"
        "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent?key=abc"
    )


def test_upstream_url_maps_http_schemes() -> None:
    assert build_upstream_url("https://example.test/v1alpha", "k").startswith("wss://example.test/ws/")
    assert build_upstream_url("http://localhost:9000", "k").startswith("ws://localhost:9000/ws/")


@pytest.mark.asyncio
async def test_open_sends_setup_first_and_returns_ack() -> None:
    upstream = FakeUpstream()
    connector = FakeConnector(upstream)
    opened: list[bool] = []
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=connector, on_open=lambda: opened.append(True))

    upstream.push({"usageMetadata": {}})
    upstream.push(SETUP_COMPLETE)
    ack = await adapter.open()

    assert ack == SetupComplete()
    assert opened == [True]
    assert adapter.is_open
    assert upstream.messages == [
        {"setup": {"model": "models/test-live", "generation_config": {"response_modalities": ["TEXT"]}}}
    ]
    url, kwargs = connector.calls[0]
    assert url.endswith("?key=test-key")
    assert "max_size" in kwargs


@pytest.mark.asyncio
async def test_open_times_out_without_setup_complete() -> None:
    upstream = FakeUpstream()
    adapter = UpstreamAdapter(upstream_settings(handshake_timeout_s=0.05), connect_fn=FakeConnector(upstream))

    with pytest.raises(ConnectError) as info:
        await adapter.open()

    assert info.value.reason == HANDSHAKE_TIMEOUT
    assert upstream.closed
    assert not adapter.is_open


@pytest.mark.asyncio
async def test_open_times_out_when_connect_hangs() -> None:
    adapter = UpstreamAdapter(upstream_settings(handshake_timeout_s=0.05), connect_fn=FakeConnector(hang=True))

    with pytest.raises(ConnectError) as info:
        await adapter.open()
    assert info.value.reason == HANDSHAKE_TIMEOUT


@pytest.mark.asyncio
async def test_open_maps_connect_errors_to_transport_failure() -> None:
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector(error=OSError("refused")))

    with pytest.raises(ConnectError) as info:
        await adapter.open()
    assert info.value.reason == TRANSPORT_FAILURE
    assert "refused" in str(info.value)


@pytest.mark.asyncio
async def test_upstream_closing_during_handshake_is_a_connect_error() -> None:
    upstream = FakeUpstream()
    upstream.end()
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector(upstream))

    with pytest.raises(ConnectError) as info:
        await adapter.open()
    assert info.value.reason == TRANSPORT_FAILURE


@pytest.mark.asyncio
async def test_receive_yields_in_order_and_survives_malformed_messages() -> None:
    upstream = FakeUpstream()
    upstream.push(SETUP_COMPLETE)
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector(upstream))
    await adapter.open()

    upstream.push(fragment("one"))
    upstream.push("not json")
    upstream.push({"foo": 1})
    upstream.push(fragment("two"))
    upstream.end()

    envelopes = await asyncio.wait_for(_collect(adapter), timeout=1.0)
    assert envelopes == [
        TranscriptFragment(text="one"),
        OtherMessage(raw="not json"),
        OtherMessage(raw='{"foo": 1}'),
        TranscriptFragment(text="two"),
    ]
    assert adapter.failure is None


@pytest.mark.asyncio
async def test_receive_records_abnormal_close() -> None:
    upstream = FakeUpstream()
    upstream.push(SETUP_COMPLETE)
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector(upstream))
    await adapter.open()

    upstream.fail()
    assert await asyncio.wait_for(_collect(adapter), timeout=1.0) == []
    assert isinstance(adapter.failure, TransportError)
    assert adapter.failure.side == SIDE_UPSTREAM


@pytest.mark.asyncio
async def test_send_audio_and_idempotent_close() -> None:
    upstream = FakeUpstream()
    upstream.push(SETUP_COMPLETE)
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector(upstream))
    await adapter.open()

    await adapter.send_audio(b"\x01\x02")
    await adapter.close()
    await adapter.close()

    assert upstream.audio_frames == [b"\x01\x02"]
    assert upstream.close_calls == 1
    with pytest.raises(TransportError):
        await adapter.send_audio(b"\x03")


@pytest.mark.asyncio
async def test_send_audio_before_open_is_rejected() -> None:
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=FakeConnector())
    with pytest.raises(TransportError):
        await adapter.send_audio(b"\x00")


@pytest.mark.asyncio
async def test_close_without_open_is_safe() -> None:
    connector = FakeConnector()
    adapter = UpstreamAdapter(upstream_settings(), connect_fn=connector)
    await adapter.close()
    assert connector.calls == []
    with pytest.raises(ConnectError):
        await adapter.open()
