"""Google Geocoding API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook

GEOCODE_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/"


@dataclass(frozen=True)
class GeocodeConfig:
    api_key: str
    resilience: ResilienceConfig


def get_geocode_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
    cache_path: str | None = None,
) -> GeocodeConfig:
    values = require_env_vars(("GOOGLE_GEOCODE_API_KEY",))
    cache = CacheConfig(sqlite_path=cache_path, should_cache=cache_predicate)
    return GeocodeConfig(
        api_key=values["GOOGLE_GEOCODE_API_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="geocode",
            base_url=GEOCODE_BASE_URL,
            timeout_seconds=10.0,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            cache=cache,
        ),
    )
