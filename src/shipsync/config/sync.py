"""Concurrency defaults for reconciliation passes."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_CALL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SyncConfig:
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS


def get_sync_config() -> SyncConfig:
    max_concurrency = env_int("SHIPSYNC_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY)
    call_timeout = env_float("SHIPSYNC_CALL_TIMEOUT_SECONDS", DEFAULT_CALL_TIMEOUT_SECONDS)
    if max_concurrency < 1:
        raise ConfigurationError("SHIPSYNC_MAX_CONCURRENCY must be at least 1")
    if call_timeout <= 0:
        raise ConfigurationError("SHIPSYNC_CALL_TIMEOUT_SECONDS must be positive")
    return SyncConfig(max_concurrency=max_concurrency, call_timeout_seconds=call_timeout)
