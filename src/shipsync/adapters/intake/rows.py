"""Translate intake form responses into outbound shipment candidates.

The form's column titles drift over time ("Email Address", "Email address (work)",
...), so columns are found by case-insensitive substring instead of position.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import UTC, datetime, timedelta, timezone
from logging import getLogger
from typing import TYPE_CHECKING, Final

from shipsync.domain.errors import IntakeError
from shipsync.domain.model import OutboundShipment
from shipsync.domain.ports import IntakeCandidate

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shipsync.domain.ports import RowSource

log = getLogger(__name__)

TIMESTAMP_FORMAT: Final = "%m/%d/%Y %H:%M:%S"
# Form timestamps are written in Pacific Standard Time without an offset.
SOURCE_OFFSET: Final = timezone(timedelta(hours=-8))
DEFAULT_COUNTRY: Final = "US"
NOT_APPLICABLE: Final = "N/A"


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Column index per logical field; ``None`` when the sheet has no such column."""

    timestamp: int | None = None
    name: int | None = None
    email: int | None = None
    phone: int | None = None
    street_1: int | None = None
    street_2: int | None = None
    city: int | None = None
    state: int | None = None
    zipcode: int | None = None
    country: int | None = None
    carrier: int | None = None
    tracking_number: int | None = None
    sent: int | None = None
    hoodie_size: int | None = None
    fleece_size: int | None = None
    womens_shirt_size: int | None = None
    unisex_shirt_size: int | None = None
    kids_shirt_size: int | None = None


_COLUMN_PATTERNS: Final[dict[str, tuple[str, ...]]] = {
    "timestamp": ("timestamp",),
    "name": ("name",),
    "email": ("email address", "email"),
    "phone": ("phone",),
    "street_1": ("street address line 1",),
    "street_2": ("street address line 2",),
    "city": ("city",),
    "state": ("state",),
    "zipcode": ("zipcode", "zip code", "postal code"),
    "country": ("country",),
    "carrier": ("carrier",),
    "tracking_number": ("tracking number",),
    "sent": ("sent",),
    "hoodie_size": ("hoodie",),
    "fleece_size": ("fleece",),
    "womens_shirt_size": ("women's tee",),
    "unisex_shirt_size": ("unisex tee",),
    "kids_shirt_size": ("onesie",),
}

# Size column -> item name used on the packing list and customs declaration.
SIZE_ITEMS: Final[dict[str, str]] = {
    "hoodie_size": "Hoodie",
    "fleece_size": "Fleece",
    "womens_shirt_size": "Women's Shirt",
    "unisex_shirt_size": "Unisex Shirt",
    "kids_shirt_size": "Kids Shirt",
}

_ADDRESS_FIELDS: Final = ("street_1", "street_2", "city", "state", "zipcode")


def discover_columns(header: Sequence[str]) -> ColumnMapping:
    """Map logical fields to columns; the first matching column wins."""

    lowered = [cell.strip().lower() for cell in header]
    found: dict[str, int] = {}
    for field_name, patterns in _COLUMN_PATTERNS.items():
        for index, title in enumerate(lowered):
            if any(pattern in title for pattern in patterns):
                found[field_name] = index
                break
    mapping = ColumnMapping(**found)
    missing = [f.name for f in fields(ColumnMapping) if getattr(mapping, f.name) is None]
    if missing:
        log.debug("Intake header has no column for: %s", ", ".join(missing))
    return mapping


def parse_timestamp(raw: str) -> datetime:
    try:
        local = datetime.strptime(raw.strip(), TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise IntakeError(f"Unparseable form timestamp {raw!r}") from exc
    return local.replace(tzinfo=SOURCE_OFFSET).astimezone(UTC)


def build_contents(values: Mapping[str, str]) -> str:
    lines = [
        f"1 x {item}, Size: {size}"
        for field_name, item in SIZE_ITEMS.items()
        if (size := values.get(field_name, "").strip()) and NOT_APPLICABLE not in size
    ]
    return "\n".join(lines)


def build_candidate(
    values: Mapping[str, str],
    *,
    notes: str = "",
    default_country: str = DEFAULT_COUNTRY,
) -> IntakeCandidate:
    """Turn logical field values into a candidate; absent fields stay empty."""

    def value(name: str) -> str:
        return values.get(name, "").strip()

    email = value("email").lower()
    if not email:
        raise IntakeError("Intake entry has no email address")
    raw_timestamp = value("timestamp")
    if not raw_timestamp:
        raise IntakeError(f"Intake entry for {email} has no timestamp")

    shipment = OutboundShipment(
        created_time=parse_timestamp(raw_timestamp),
        name=value("name"),
        email=email,
        phone=value("phone"),
        street_1=value("street_1").upper(),
        street_2=value("street_2").upper(),
        city=value("city").upper(),
        state=value("state").upper(),
        zipcode=value("zipcode").upper(),
        country=value("country").upper() or default_country,
        carrier=value("carrier"),
        tracking_number=value("tracking_number"),
        contents=build_contents(values),
        notes=notes,
    )
    return IntakeCandidate(shipment=shipment, fulfilled="true" in value("sent").lower())


def _cell(row: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def parse_row(
    mapping: ColumnMapping, row: Sequence[str], *, source_id: str = ""
) -> IntakeCandidate:
    values = {f.name: _cell(row, getattr(mapping, f.name)) for f in fields(ColumnMapping)}
    notes = f"Automatically generated from the Google sheet {source_id}" if source_id else ""
    return build_candidate(values, notes=notes)


def parse_sheet(source: RowSource) -> list[IntakeCandidate]:
    """Parse every response row, stopping at the first row without an email.

    A malformed row is logged and skipped so one typo does not hold up the rest of
    the sheet.
    """

    mapping = discover_columns(source.header())
    if mapping.email is None:
        raise IntakeError(f"Sheet {source.source_id} has no email column")

    candidates: list[IntakeCandidate] = []
    for number, row in enumerate(source.rows(), start=2):
        if not _cell(row, mapping.email).strip():
            break
        try:
            candidates.append(parse_row(mapping, row, source_id=source.source_id))
        except IntakeError as exc:
            log.warning("Skipping row %s of sheet %s: %s", number, source.source_id, exc)
    log.info("Parsed %s intake rows from sheet %s", len(candidates), source.source_id)
    return candidates


def address_present(values: Mapping[str, str]) -> bool:
    return any(values.get(name, "").strip() for name in _ADDRESS_FIELDS)
