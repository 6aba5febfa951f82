"""Apply carrier tracking updates to shipment records."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from shipsync.domain.model import ShipmentStatus

if TYPE_CHECKING:
    from datetime import datetime

    from shipsync.domain.model import Shipment
    from shipsync.domain.ports import TrackingStatus

log = getLogger(__name__)

TRANSIT_STATES: Final = frozenset({"TRANSIT", "IN_TRANSIT"})
DELIVERED: Final = "DELIVERED"
RETURNED: Final = "RETURNED"
FAILURE: Final = "FAILURE"

_TERMINAL_BY_STATE: Final[dict[str, ShipmentStatus]] = {
    RETURNED: ShipmentStatus.RETURNED,
    FAILURE: ShipmentStatus.FAILURE,
}


@dataclass(frozen=True, slots=True)
class TrackingUpdate:
    previous_status: str
    status: str
    newly_shipped: bool = False

    @property
    def status_changed(self) -> bool:
        return self.previous_status != self.status


def earliest_transit(tracking: TrackingStatus) -> datetime | None:
    """Earliest moment the carrier reported the parcel as moving."""

    moments = [
        event.status_date
        for event in tracking.history
        if event.status.upper() in TRANSIT_STATES and event.status_date is not None
    ]
    if tracking.status.upper() in TRANSIT_STATES and tracking.status_date is not None:
        moments.append(tracking.status_date)
    return min(moments, default=None)


def apply_tracking(shipment: Shipment, tracking: TrackingStatus, *, host: str) -> TrackingUpdate:
    """Copy ``tracking`` onto ``shipment`` and advance its lifecycle status.

    ``shipped_time`` and ``delivered_time`` only ever move earlier. The returned
    update reports whether this call moved the shipment to ``Shipped``, which is
    when the recipient gets told their package is on the way.
    """

    previous = shipment.status
    state = tracking.status.upper()

    shipment.tracking_status = tracking.status
    if tracking.eta is not None:
        shipment.eta = tracking.eta
    if tracking.status_details:
        shipment.messages = tracking.status_details
    shipment.refresh_links(host=host)

    shipment.record_shipped(earliest_transit(tracking))

    newly_shipped = False
    if state in TRANSIT_STATES:
        if shipment.status != ShipmentStatus.SHIPPED:
            newly_shipped = True
        shipment.status = ShipmentStatus.SHIPPED
    elif state == DELIVERED:
        shipment.status = ShipmentStatus.DELIVERED
        shipment.record_delivered(tracking.status_date)
    elif state in _TERMINAL_BY_STATE:
        shipment.status = _TERMINAL_BY_STATE[state]

    if shipment.status != previous:
        log.info(
            "Shipment %s moved %s -> %s (carrier state %s)",
            shipment.id,
            previous,
            shipment.status,
            tracking.status,
        )
    return TrackingUpdate(
        previous_status=previous,
        status=shipment.status,
        newly_shipped=newly_shipped,
    )
