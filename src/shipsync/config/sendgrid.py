"""SendGrid notification configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import ResilienceConfig

SENDGRID_BASE_URL = "https://api.sendgrid.com/v3/"


@dataclass(frozen=True)
class SendGridConfig:
    api_key: str
    resilience: ResilienceConfig


def get_sendgrid_config(*, resilience: ResilienceConfig | None = None) -> SendGridConfig:
    values = require_env_vars(("SENDGRID_API_KEY",))
    return SendGridConfig(
        api_key=values["SENDGRID_API_KEY"],
        resilience=resilience
        or ResilienceConfig(name="sendgrid", base_url=SENDGRID_BASE_URL, timeout_seconds=15.0),
    )
