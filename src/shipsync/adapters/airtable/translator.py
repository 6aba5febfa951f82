"""Translate between Airtable records and shipment domain objects."""

from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from typing import TYPE_CHECKING, Final

from shipsync.domain.model import Direction, Shipment
from shipsync.domain.reconciliation.merge import MergePolicy, policy_for

from .schema import ShipmentFields

if TYPE_CHECKING:
    from collections.abc import Hashable

    from shipsync.domain.model import PackagePickup

    from .schema import ShipmentRecord

# Columns that exist in the Inbound table; everything else is outbound only.
_INBOUND_COLUMNS: Final = frozenset(
    {
        "name",
        "notes",
        "carrier",
        "tracking_number",
        "tracking_link",
        "branded_tracking_link",
        "tracking_status",
        "status",
        "eta",
        "shipped_time",
        "delivered_time",
        "messages",
    }
)

_NEVER_WRITTEN: Final = frozenset({"id", "mirror_record_id"})

_KEY_COLUMNS: Final[dict[Direction, tuple[str, str]]] = {
    Direction.OUTBOUND: ("email", "created_time"),
    Direction.INBOUND: ("carrier", "tracking_number"),
}


def column_name(field_name: str) -> str:
    info = ShipmentFields.model_fields[field_name]
    return info.alias or field_name


def writable_fields(shipment_type: type[Shipment]) -> tuple[str, ...]:
    """Computed fields we own and push to the mirror, in declaration order."""

    table = policy_for(shipment_type)
    names = [
        f.name
        for f in fields(shipment_type)
        if f.name not in _NEVER_WRITTEN and table[f.name] is not MergePolicy.AUTHORITY
    ]
    if shipment_type.direction is Direction.INBOUND:
        names = [name for name in names if name in _INBOUND_COLUMNS]
    return tuple(names)


def _cell(value: object) -> object:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, list):
        return list(value)
    return value


def shipment_fields(shipment: Shipment) -> dict[str, object]:
    """Airtable ``fields`` payload for ``shipment``; mirror-owned columns are left out."""

    payload: dict[str, object] = {}
    for name in writable_fields(type(shipment)):
        value = getattr(shipment, name)
        if value is None:
            continue
        if name == "label_link":
            if value:
                payload[column_name(name)] = [{"url": value}]
            continue
        payload[column_name(name)] = _cell(value)
    return payload


def parse_shipment[TShipment: Shipment](
    record: ShipmentRecord, shipment_type: type[TShipment]
) -> TShipment:
    data = record.values
    columns = ShipmentFields.model_fields
    values: dict[str, object] = {
        f.name: getattr(data, f.name) for f in fields(shipment_type) if f.name in columns
    }
    values["mirror_record_id"] = record.id
    if not data.status:
        # new rows typed in by hand have no status yet
        values.pop("status")
    if data.created_time is None and record.created_time is not None:
        values["created_time"] = record.created_time
    return shipment_type(**values)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def key_formula(direction: Direction, key: Hashable) -> str | None:
    """``filterByFormula`` expression matching ``key``, or ``None`` when the key is incomplete."""

    if not isinstance(key, tuple) or len(key) != 2:
        raise TypeError(f"Unexpected shipment key {key!r}")
    clauses: list[str] = []
    for column, value in zip(_KEY_COLUMNS[direction], key, strict=True):
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            clauses.append(f"IS_SAME({{{column}}}, '{value.isoformat()}', 'second')")
        else:
            clauses.append(f"LOWER({{{column}}}) = '{_escape(str(value).lower())}'")
    return f"AND({', '.join(clauses)})"


def pickup_fields(pickup: PackagePickup) -> dict[str, object]:
    payload: dict[str, object] = {
        "shippo_id": pickup.carrier_pickup_id,
        "confirmation_code": pickup.confirmation_code,
        "carrier": pickup.carrier,
        "status": pickup.status,
        "location": pickup.location,
        "transactions": list(pickup.transactions),
        "link_to_outbound_shipments": list(pickup.shipment_record_ids),
        "messages": pickup.messages,
    }
    for name in (
        "requested_start_time",
        "requested_end_time",
        "confirmed_start_time",
        "confirmed_end_time",
        "cancel_by_time",
    ):
        value = getattr(pickup, name)
        if value is not None:
            payload[name] = value.isoformat()
    return payload
