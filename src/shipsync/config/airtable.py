"""Airtable mirror configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

AIRTABLE_BASE_URL = "https://api.airtable.com/v0/"


@dataclass(frozen=True, slots=True)
class AirtableTables:
    outbound: str = "Outbound"
    inbound: str = "Inbound"
    pickups: str = "Package Pickups"


@dataclass(frozen=True)
class AirtableConfig:
    """Holds Airtable API configuration values for the shipments base."""

    api_key: str
    base_id: str
    resilience: ResilienceConfig
    tables: AirtableTables = field(default_factory=AirtableTables)


def get_airtable_config(*, resilience: ResilienceConfig | None = None) -> AirtableConfig:
    values = require_env_vars(("AIRTABLE_API_KEY", "AIRTABLE_BASE_ID_SHIPMENTS"))
    tables = AirtableTables(
        outbound=optional_env_var("AIRTABLE_OUTBOUND_TABLE", "Outbound"),
        inbound=optional_env_var("AIRTABLE_INBOUND_TABLE", "Inbound"),
        pickups=optional_env_var("AIRTABLE_PICKUPS_TABLE", "Package Pickups"),
    )
    return AirtableConfig(
        api_key=values["AIRTABLE_API_KEY"],
        base_id=values["AIRTABLE_BASE_ID_SHIPMENTS"],
        tables=tables,
        resilience=resilience
        or ResilienceConfig(
            name="airtable",
            base_url=AIRTABLE_BASE_URL,
            # Airtable allows five requests per second per base
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        ),
    )
