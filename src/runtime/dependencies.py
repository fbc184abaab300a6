"""Runtime dependency construction (session coordinator + admission control)."""

from __future__ import annotations

import logging

from src.state import RuntimeDeps
from src.state.settings import AppSettings
from src.config.secrets import ENV_UPSTREAM_API_KEY
from src.realtime.adapter import ConnectFn
from src.handlers.connections import ConnectionManager
from src.realtime.coordinator import TranscriptionCoordinator

from .settings_loader import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(settings: AppSettings | None = None, *, connect_fn: ConnectFn | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    coordinator = TranscriptionCoordinator(settings.upstream, settings.session, connect_fn=connect_fn)
    if not coordinator.has_credential:
        # Sessions will be refused at bind time; keep serving health checks.
        logger.warning("%s is not set; transcription sessions will be rejected", ENV_UPSTREAM_API_KEY)

    connections = ConnectionManager(max_connections=settings.limits.max_concurrent_connections)
    logger.info(
        "runtime: upstream=%s model=%s max_connections=%s",
        settings.upstream.base_url,
        coordinator.model,
        settings.limits.max_concurrent_connections,
    )

    return RuntimeDeps(
        connections=connections,
        coordinator=coordinator,
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps"]
