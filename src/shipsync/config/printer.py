"""Label printer configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy


@dataclass(frozen=True)
class PrinterConfig:
    url: str
    resilience: ResilienceConfig

    @property
    def label_endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/rollo"


def get_printer_config(*, resilience: ResilienceConfig | None = None) -> PrinterConfig:
    values = require_env_vars(("PRINTER_URL",))
    return PrinterConfig(
        url=values["PRINTER_URL"],
        resilience=resilience
        or ResilienceConfig(
            name="printer",
            timeout_seconds=20.0,
            retry=RetryPolicy(total=2),
        ),
    )
