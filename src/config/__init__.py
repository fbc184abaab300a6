"""Configuration module exports (env names and defaults only)."""

from .limits import (
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
)
from .upstream import (
    DEFAULT_UPSTREAM_MODEL,
    DEFAULT_UPSTREAM_BASE_URL,
)

__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_UPSTREAM_BASE_URL",
    "DEFAULT_UPSTREAM_MODEL",
]
