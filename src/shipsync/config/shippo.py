"""Shippo carrier API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

SHIPPO_BASE_URL = "https://api.goshippo.com/"
SHIPPO_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ShippoConfig:
    """Holds Shippo API configuration values."""

    api_token: str
    resilience: ResilienceConfig


def get_shippo_config(*, resilience: ResilienceConfig | None = None) -> ShippoConfig:
    values = require_env_vars(("SHIPPO_API_TOKEN",))
    return ShippoConfig(
        api_token=values["SHIPPO_API_TOKEN"],
        resilience=resilience
        or ResilienceConfig(
            name="shippo",
            base_url=SHIPPO_BASE_URL,
            timeout_seconds=SHIPPO_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
