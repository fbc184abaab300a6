#!/usr/bin/env python3
"""Stream an audio file to /ws/transcribe and print transcripts (manual debugging).

Raw `.pcm`/`.raw` files are sent as-is and must already be PCM16 mono @16k.
Anything else is decoded with ffmpeg.
"""

from __future__ import annotations

import sys
import time
import shutil
import asyncio
import argparse
import contextlib
from pathlib import Path
import subprocess  # noqa: S404

import websockets

if __package__ in {None, ""}:
    sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from tests.params.env import build_ws_url, derive_default_server  # noqa: E402

SAMPLE_RATE_HZ = 16000
RAW_EXTS = {".pcm", ".raw"}


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream audio to the live transcription gateway")
    p.add_argument("file", help="Audio file (.pcm/.raw PCM16 mono 16k, or anything ffmpeg reads)")
    p.add_argument("--server", default=derive_default_server())
    p.add_argument("--secure", action="store_true")
    p.add_argument("--chunk-ms", type=int, default=100)
    p.add_argument("--no-pace", action="store_true", help="Send as fast as possible")
    p.add_argument("--tail-s", type=float, default=3.0, help="Wait for late transcripts after the last frame")
    return p.parse_args()


def load_pcm16(path: Path) -> bytes:
    if path.suffix.lower() in RAW_EXTS:
        return path.read_bytes()
    if shutil.which("ffmpeg") is None:
        raise FileNotFoundError("ffmpeg not found (required for decoding this file type)")
    cmd = [
        "ffmpeg",
        "-nostdin",
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        str(path),
        "-f",
        "s16le",
        "-acodec",
        "pcm_s16le",
        "-ac",
        "1",
        "-ar",
        str(SAMPLE_RATE_HZ),
        "pipe:1",
    ]
    return subprocess.run(cmd, check=True, capture_output=True).stdout  # noqa: S603


async def _recv_printer(ws, t0: float) -> None:
    async for raw in ws:
        if isinstance(raw, str):
            print(f"[{time.perf_counter() - t0:6.2f}s] << {raw}", flush=True)


async def _stream(ws, pcm: bytes, *, chunk_ms: int, pace: bool) -> int:
    chunk_bytes = max(2, SAMPLE_RATE_HZ * 2 * chunk_ms // 1000)
    t0 = time.perf_counter()
    sent = 0
    for i in range(0, len(pcm), chunk_bytes):
        await ws.send(pcm[i : i + chunk_bytes])
        sent += 1
        if pace:
            target = t0 + sent * chunk_ms / 1000.0
            delay = target - time.perf_counter()
            if delay > 0:
                await asyncio.sleep(delay)
    return sent


async def run(args: argparse.Namespace) -> int:
    pcm = load_pcm16(Path(args.file))
    ws_url = build_ws_url(args.server, secure=args.secure)
    print(f"ws: {ws_url} ({len(pcm) / (SAMPLE_RATE_HZ * 2):.1f}s of audio)")

    async with websockets.connect(ws_url, max_size=None) as ws:
        t0 = time.perf_counter()
        printer = asyncio.create_task(_recv_printer(ws, t0))
        try:
            frames = await _stream(ws, pcm, chunk_ms=args.chunk_ms, pace=not args.no_pace)
            print(f"sent {frames} frames; waiting {args.tail_s:.1f}s for transcripts")
            with contextlib.suppress(TimeoutError, websockets.ConnectionClosed):
                await asyncio.wait_for(asyncio.shield(printer), timeout=args.tail_s)
        finally:
            printer.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await printer
        if ws.close_code is not None:
            print(f"closed by server: code={ws.close_code} reason={ws.close_reason!r}")
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
