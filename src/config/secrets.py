"""Secrets configuration."""

from __future__ import annotations

ENV_UPSTREAM_API_KEY = "GOOGLE_API_KEY"

__all__ = ["ENV_UPSTREAM_API_KEY"]
