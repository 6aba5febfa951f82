"""Field-level merge of shipment records arriving from overlapping sources.

Every field of a shipment is owned by exactly one :class:`MergePolicy`:

``GAP_FILL``
    Sticky fields. A populated existing value is never replaced; the incoming
    value only fills a gap. Carrier identifiers, timestamps and lifecycle fields
    live here so a late or partial intake event cannot roll a record back.
``INCOMING``
    Intake-owned fields. A populated incoming value wins; an empty incoming value
    keeps what we had, so a webhook that omits a field never wipes it.
``AUTHORITY``
    Mirror-owned fields that people edit by hand. The existing value, which is
    the repository record overlaid with the mirror (see :func:`overlay_authority`),
    always wins.

The tables are checked at import time: adding a field to a shipment without
giving it a policy fails loudly instead of silently dropping data.
"""

from __future__ import annotations

from dataclasses import fields
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from shipsync.domain.model import InboundShipment, OutboundShipment, Shipment

if TYPE_CHECKING:
    from collections.abc import Mapping


class MergePolicy(StrEnum):
    GAP_FILL = "gap_fill"
    INCOMING = "incoming"
    AUTHORITY = "authority"


_STICKY_FIELDS: Final = (
    "id",
    "mirror_record_id",
    "address_formatted",
    "latitude",
    "longitude",
    "carrier",
    "tracking_number",
    "tracking_link",
    "branded_tracking_link",
    "tracking_status",
    "eta",
    "shipped_time",
    "delivered_time",
    "label_link",
    "cost",
    "carrier_shipment_id",
    "status",
    "messages",
    "pickup_date",
)

_INTAKE_FIELDS: Final = (
    "email",
    "phone",
    "contents",
    "street_1",
    "street_2",
    "city",
    "state",
    "zipcode",
    "country",
    "created_time",
)

_MIRROR_FIELDS: Final = ("local_pickup", "pickup_links", "geocode_cache")


def _table(**groups: tuple[str, ...]) -> Mapping[str, MergePolicy]:
    table: dict[str, MergePolicy] = {}
    for policy_name, names in groups.items():
        policy = MergePolicy(policy_name)
        for name in names:
            table[name] = policy
    return MappingProxyType(table)


OUTBOUND_POLICY: Final = _table(
    gap_fill=(*_STICKY_FIELDS, "notes"),
    incoming=(*_INTAKE_FIELDS, "name"),
    authority=_MIRROR_FIELDS,
)

# Inbound rows are created by hand in the mirror, so the people editing it also
# own the name and notes columns.
INBOUND_POLICY: Final = _table(
    gap_fill=_STICKY_FIELDS,
    incoming=_INTAKE_FIELDS,
    authority=(*_MIRROR_FIELDS, "name", "notes"),
)

_POLICIES: Final[dict[type[Shipment], Mapping[str, MergePolicy]]] = {
    OutboundShipment: OUTBOUND_POLICY,
    InboundShipment: INBOUND_POLICY,
}


def policy_for(shipment_type: type[Shipment]) -> Mapping[str, MergePolicy]:
    try:
        return _POLICIES[shipment_type]
    except KeyError:
        raise TypeError(f"No merge policy for {shipment_type.__name__}") from None


def _check_complete(shipment_type: type[Shipment], table: Mapping[str, MergePolicy]) -> None:
    names = {f.name for f in fields(shipment_type)}
    missing = names - table.keys()
    unknown = table.keys() - names
    if missing or unknown:
        raise RuntimeError(
            f"Merge policy for {shipment_type.__name__} is out of date: "
            f"missing={sorted(missing)}, unknown={sorted(unknown)}"
        )


for _shipment_type, _table_value in _POLICIES.items():
    _check_complete(_shipment_type, _table_value)


def is_empty(value: object) -> bool:
    """Return whether ``value`` is the zero value of its type."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, bool):
        return not value
    if isinstance(value, int | float):
        return value == 0
    if isinstance(value, list | tuple | set | frozenset | dict):
        return len(value) == 0
    return False


def _resolve(policy: MergePolicy, incoming: object, existing: object) -> object:
    if policy is MergePolicy.AUTHORITY:
        return existing
    if policy is MergePolicy.INCOMING:
        return existing if is_empty(incoming) else incoming
    return incoming if is_empty(existing) else existing


def merge[TShipment: Shipment](
    incoming: TShipment,
    existing: TShipment | None,
    *,
    tracking_host: str,
) -> TShipment:
    """Merge ``incoming`` into ``existing`` and return a new record.

    Neither argument is modified. With no existing record the result is a copy of
    ``incoming``. Derived links are recomputed from the merged carrier and
    tracking number.
    """

    shipment_type = type(incoming)
    if existing is not None and type(existing) is not shipment_type:
        raise TypeError(
            f"Cannot merge {shipment_type.__name__} into {type(existing).__name__}"
        )
    table = policy_for(shipment_type)

    values: dict[str, object] = {}
    for f in fields(shipment_type):
        incoming_value = getattr(incoming, f.name)
        if existing is None:
            values[f.name] = _copy_value(incoming_value)
            continue
        resolved = _resolve(table[f.name], incoming_value, getattr(existing, f.name))
        values[f.name] = _copy_value(resolved)

    merged = shipment_type(**values)
    merged.refresh_links(host=tracking_host)
    return merged


def overlay_authority[TShipment: Shipment](
    shipment: TShipment,
    mirror_record: TShipment | None,
) -> TShipment:
    """Return a copy of ``shipment`` carrying the mirror's values for mirror-owned fields."""

    table = policy_for(type(shipment))
    values = {f.name: _copy_value(getattr(shipment, f.name)) for f in fields(shipment)}
    if mirror_record is not None:
        for name, policy in table.items():
            if policy is MergePolicy.AUTHORITY:
                values[name] = _copy_value(getattr(mirror_record, name))
        if not values["mirror_record_id"]:
            values["mirror_record_id"] = mirror_record.mirror_record_id
    return type(shipment)(**values)


def copy_shipment[TShipment: Shipment](shipment: TShipment) -> TShipment:
    """Detached working copy of a record."""

    values = {f.name: _copy_value(getattr(shipment, f.name)) for f in fields(shipment)}
    return type(shipment)(**values)


def _copy_value(value: object) -> object:
    if isinstance(value, list):
        return list(value)
    return value
