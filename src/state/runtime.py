"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.state.settings import AppSettings
    from src.realtime.coordinator import TranscriptionCoordinator
    from src.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    coordinator: TranscriptionCoordinator
    settings: AppSettings


__all__ = ["RuntimeDeps"]
