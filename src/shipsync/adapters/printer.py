"""HTTP label printer."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.printer import PrinterConfig, get_printer_config
from shipsync.domain.errors import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.ports import LabelPrinter

log = getLogger(__name__)

_ACCEPTED = 202


class PrinterError(ExternalServiceError):
    service = "printer"


@dataclass(kw_only=True)
class HttpLabelPrinter(ServiceClient):
    """Posts label URLs to the print server, which queues them on the label printer."""

    error_type: ClassVar[type[ExternalServiceError]] = PrinterError

    config: PrinterConfig

    @classmethod
    def from_config(
        cls,
        config: PrinterConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> HttpLabelPrinter:
        resolved = config or get_printer_config()
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    async def print_label(self, label_url: str) -> None:
        if not label_url:
            raise PrinterError("Cannot print a shipment without a label URL")
        response = await self._request(
            "POST", self.config.label_endpoint, json={"url": label_url}
        )
        if response.status_code != _ACCEPTED:
            raise PrinterError(
                f"Printer answered {response.status_code} instead of {_ACCEPTED}",
                status_code=response.status_code,
            )
        log.info("Sent label %s to the printer", label_url)


if TYPE_CHECKING:
    _printer_check: LabelPrinter = HttpLabelPrinter.from_config()
