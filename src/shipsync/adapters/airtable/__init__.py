"""Public interface for the Airtable mirror adapter."""

from __future__ import annotations

from .client import (
    AirtableBase,
    AirtableMirrors,
    AirtablePickupMirror,
    AirtableShipmentMirror,
    MirrorAPIError,
    build_airtable_mirrors,
)
from .schema import ShipmentFields, ShipmentRecord
from .translator import key_formula, parse_shipment, shipment_fields

__all__ = [
    "AirtableBase",
    "AirtableMirrors",
    "AirtablePickupMirror",
    "AirtableShipmentMirror",
    "MirrorAPIError",
    "ShipmentFields",
    "ShipmentRecord",
    "build_airtable_mirrors",
    "key_formula",
    "parse_shipment",
    "shipment_fields",
]
