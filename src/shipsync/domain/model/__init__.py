"""Public domain model surface."""

from __future__ import annotations

from shipsync.domain.model.enums import TERMINAL_STATUSES, Carrier, Direction, ShipmentStatus
from shipsync.domain.model.pickup import PackagePickup
from shipsync.domain.model.shipment import (
    InboundKey,
    InboundShipment,
    OutboundKey,
    OutboundShipment,
    Shipment,
    branded_tracking_link,
    carrier_tracking_link,
    normalize_country,
    tracking_carrier_code,
)

__all__ = [
    "TERMINAL_STATUSES",
    "Carrier",
    "Direction",
    "InboundKey",
    "InboundShipment",
    "OutboundKey",
    "OutboundShipment",
    "PackagePickup",
    "Shipment",
    "ShipmentStatus",
    "branded_tracking_link",
    "carrier_tracking_link",
    "normalize_country",
    "tracking_carrier_code",
]
