"""Google Sheets intake configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets/"
DEFAULT_SHEET_RANGE = "Form Responses 1"


@dataclass(frozen=True)
class SheetsConfig:
    """Holds the spreadsheets that feed outbound shipments."""

    access_token: str
    spreadsheet_ids: tuple[str, ...]
    resilience: ResilienceConfig
    sheet_range: str = DEFAULT_SHEET_RANGE


def get_sheets_config(*, resilience: ResilienceConfig | None = None) -> SheetsConfig:
    values = require_env_vars(("GOOGLE_SHEETS_ACCESS_TOKEN", "SHIPMENT_SPREADSHEET_IDS"))
    spreadsheet_ids = env_list(values["SHIPMENT_SPREADSHEET_IDS"])
    if not spreadsheet_ids:
        raise ConfigurationError("SHIPMENT_SPREADSHEET_IDS must name at least one spreadsheet")
    return SheetsConfig(
        access_token=values["GOOGLE_SHEETS_ACCESS_TOKEN"],
        spreadsheet_ids=spreadsheet_ids,
        sheet_range=optional_env_var("SHIPMENT_SHEET_RANGE", DEFAULT_SHEET_RANGE),
        resilience=resilience
        or ResilienceConfig(
            name="sheets",
            base_url=SHEETS_BASE_URL,
            ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        ),
    )
