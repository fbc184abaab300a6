"""Shared error types for the transcription gateway."""

from __future__ import annotations

from dataclasses import dataclass

# ConfigError reasons
MISSING_CREDENTIAL = "missing_credential"

# ConnectError reasons
HANDSHAKE_TIMEOUT = "handshake_timeout"
TRANSPORT_FAILURE = "transport_failure"

# ProtocolError reasons
MALFORMED_MESSAGE = "malformed_message"

# TransportError sides
SIDE_CLIENT = "client"
SIDE_UPSTREAM = "upstream"


@dataclass(frozen=True, slots=True)
class ConfigError(Exception):
    """Permanent configuration fault; a session cannot be bound."""

    reason: str
    message: str = ""

    def __str__(self) -> str:
        return self.message or self.reason


@dataclass(frozen=True, slots=True)
class ConnectError(Exception):
    """Upstream unreachable or the setup handshake never completed."""

    reason: str
    message: str = ""

    def __str__(self) -> str:
        return self.message or self.reason


@dataclass(frozen=True, slots=True)
class ProtocolError(Exception):
    """A single inbound upstream message could not be understood."""

    reason: str
    raw: str = ""

    def __str__(self) -> str:
        return f"{self.reason}: {self.raw[:200]}"


@dataclass(frozen=True, slots=True)
class TransportError(Exception):
    """A transport failed on one side of the session."""

    side: str
    message: str = ""

    def __str__(self) -> str:
        return f"{self.side} transport: {self.message}" if self.message else f"{self.side} transport"


__all__ = [
    "HANDSHAKE_TIMEOUT",
    "MALFORMED_MESSAGE",
    "MISSING_CREDENTIAL",
    "SIDE_CLIENT",
    "SIDE_UPSTREAM",
    "TRANSPORT_FAILURE",
    "ConfigError",
    "ConnectError",
    "ProtocolError",
    "TransportError",
]
