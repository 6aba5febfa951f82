"""Public interface for the Shippo adapter."""

from __future__ import annotations

from .client import CarrierAPIError, ShippoGateway
from .schema import ShipmentResponse, TrackResponse, TransactionResponse
from .translator import parse_rate, parse_tracking_status

__all__ = [
    "CarrierAPIError",
    "ShipmentResponse",
    "ShippoGateway",
    "TrackResponse",
    "TransactionResponse",
    "parse_rate",
    "parse_tracking_status",
]
