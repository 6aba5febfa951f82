"""Enumerations shared across the shipment model."""

from __future__ import annotations

from enum import StrEnum


class ShipmentStatus(StrEnum):
    QUEUED = "Queued"
    LABEL_CREATED = "Label created"
    LABEL_PRINTED = "Label printed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    RETURNED = "Returned"
    FAILURE = "Failure"
    PICKED_UP = "Picked up"


TERMINAL_STATUSES: frozenset[str] = frozenset(
    {
        ShipmentStatus.DELIVERED,
        ShipmentStatus.RETURNED,
        ShipmentStatus.FAILURE,
        ShipmentStatus.PICKED_UP,
    }
)


class Direction(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class Carrier(StrEnum):
    USPS = "usps"
    UPS = "ups"
    FEDEX = "fedex"
    DHL = "dhl"
