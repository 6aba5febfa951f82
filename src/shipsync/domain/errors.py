"""Error taxonomy for the shipment workflow.

Record-level errors derive from :class:`ShipmentError`. The reconciliation engine
isolates them per record so one bad shipment never stops a batch. Configuration
faults live in :mod:`shipsync.config.errors` and always propagate.
"""

from __future__ import annotations


class ShipmentError(RuntimeError):
    """Base class for failures scoped to a single shipment record."""


class ExternalServiceError(ShipmentError):
    """A collaborator (carrier, mirror, mail, printer, geocoder) failed transiently."""

    service: str = "external"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShipmentDataError(ShipmentError):
    """A record cannot be processed as-is and needs a human to fix its data."""


class IntakeError(ShipmentDataError):
    """An intake row or webhook payload could not be translated into a shipment."""
