"""Pydantic models describing Airtable records of the shipments base."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


def _none_to_zero(value: object) -> object:
    return 0.0 if value is None else value


def _attachment_url(value: object) -> object:
    """Attachment fields come back as a list of files; we only keep the first URL."""

    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict) and item.get("url"):
                return item["url"]
        return ""
    return _none_to_empty(value)


class AirtableBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ShipmentFields(AirtableBaseModel):
    """Columns shared by the ``Outbound`` and ``Inbound`` tables.

    Inbound rows only fill a subset; everything else keeps its default.
    """

    name: str = ""
    email: str = ""
    phone: str = ""
    contents: str = ""
    street_1: str = ""
    street_2: str = ""
    city: str = ""
    state: str = ""
    zipcode: str = ""
    country: str = ""
    address_formatted: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    geocode_cache: str = ""
    carrier: str = ""
    tracking_number: str = ""
    tracking_link: str = ""
    branded_tracking_link: str = ""
    tracking_status: str = ""
    eta: datetime | None = None
    shipped_time: datetime | None = None
    delivered_time: datetime | None = None
    label_link: str = ""
    cost: float = 0.0
    carrier_shipment_id: str = Field(default="", alias="shippo_id")
    status: str = ""
    local_pickup: bool = False
    notes: str = ""
    messages: str = ""
    pickup_date: date | None = None
    pickup_links: list[str] = Field(default_factory=list, alias="link_to_package_pickup")
    created_time: datetime | None = None

    _normalize_strings = field_validator(
        "name",
        "email",
        "phone",
        "contents",
        "street_1",
        "street_2",
        "city",
        "state",
        "zipcode",
        "country",
        "address_formatted",
        "geocode_cache",
        "carrier",
        "tracking_number",
        "tracking_link",
        "branded_tracking_link",
        "tracking_status",
        "carrier_shipment_id",
        "status",
        "notes",
        "messages",
        mode="before",
    )(_none_to_empty)
    _normalize_numbers = field_validator("latitude", "longitude", "cost", mode="before")(
        _none_to_zero
    )
    _normalize_times = field_validator(
        "eta", "shipped_time", "delivered_time", "created_time", "pickup_date", mode="before"
    )(_blank_to_none)
    _normalize_label = field_validator("label_link", mode="before")(_attachment_url)


class ShipmentRecord(AirtableBaseModel):
    id: str
    created_time: datetime | None = Field(default=None, alias="createdTime")
    values: ShipmentFields = Field(default_factory=ShipmentFields, alias="fields")


class ShipmentRecordsPage(AirtableBaseModel):
    records: list[ShipmentRecord] = Field(default_factory=list)
    offset: str | None = None


class RecordRef(AirtableBaseModel):
    """Minimal view of a record returned by a create or update call."""

    id: str
