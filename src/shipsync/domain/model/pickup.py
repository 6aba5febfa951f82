"""Carrier pickups batching several labelled shipments into one visit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID, uuid4


@dataclass(kw_only=True)
class PackagePickup:
    """One scheduled carrier pickup.

    ``carrier_pickup_id`` is assigned by the carrier and identifies the pickup. A
    pickup is created once, covering every shipment that was waiting at the time,
    and is never split afterwards.
    """

    id: UUID = field(default_factory=uuid4)
    carrier_pickup_id: str
    mirror_record_id: str = ""
    confirmation_code: str = ""
    carrier: str = ""
    status: str = ""
    location: str = ""
    transactions: list[str] = field(default_factory=list)
    shipment_ids: list[str] = field(default_factory=list)
    shipment_record_ids: list[str] = field(default_factory=list)
    requested_start_time: datetime | None = None
    requested_end_time: datetime | None = None
    confirmed_start_time: datetime | None = None
    confirmed_end_time: datetime | None = None
    cancel_by_time: datetime | None = None
    pickup_date: date | None = None
    messages: str = ""
