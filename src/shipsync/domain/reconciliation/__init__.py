"""Shipment reconciliation: field merge, tracking state machine and pickups."""

from __future__ import annotations

from .engine import KeyedLocks, ReconcileResult, ReconciliationEngine
from .labels import build_shipment_request, parse_quantity, select_rate
from .merge import (
    INBOUND_POLICY,
    OUTBOUND_POLICY,
    MergePolicy,
    copy_shipment,
    merge,
    overlay_authority,
)
from .pickups import CarrierAccountNotFoundError, PickupScheduler
from .tracking import TrackingUpdate, apply_tracking, earliest_transit

__all__ = [
    "INBOUND_POLICY",
    "OUTBOUND_POLICY",
    "CarrierAccountNotFoundError",
    "KeyedLocks",
    "MergePolicy",
    "PickupScheduler",
    "ReconcileResult",
    "ReconciliationEngine",
    "TrackingUpdate",
    "apply_tracking",
    "build_shipment_request",
    "copy_shipment",
    "earliest_transit",
    "merge",
    "overlay_authority",
    "parse_quantity",
    "select_rate",
]
