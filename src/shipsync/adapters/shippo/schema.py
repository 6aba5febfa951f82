"""Pydantic models describing the Shippo API payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


class ShippoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ShippoMessage(ShippoBaseModel):
    source: str | None = None
    code: str | None = None
    text: str = ""

    _normalize_text = field_validator("text", mode="before")(_none_to_empty)

    def render(self) -> str:
        prefix = ": ".join(part for part in (self.source, self.code) if part)
        return f"{prefix}: {self.text}" if prefix else self.text


class ServiceLevel(ShippoBaseModel):
    name: str = ""
    token: str = ""


class RatePayload(ShippoBaseModel):
    object_id: str
    provider: str
    amount: float
    amount_local: float | None = None
    currency: str = "USD"
    attributes: list[str] = Field(default_factory=list)
    servicelevel: ServiceLevel = Field(default_factory=ServiceLevel)

    _normalize_amount_local = field_validator("amount_local", mode="before")(_blank_to_none)


class ShipmentResponse(ShippoBaseModel):
    object_id: str
    status: str | None = None
    rates: list[RatePayload] = Field(default_factory=list)
    messages: list[ShippoMessage] = Field(default_factory=list)


class CustomsItemResponse(ShippoBaseModel):
    object_id: str


class TransactionResponse(ShippoBaseModel):
    object_id: str
    status: str
    tracking_number: str = ""
    tracking_url_provider: str = ""
    tracking_status: str = ""
    label_url: str = ""
    eta: datetime | None = None
    messages: list[ShippoMessage] = Field(default_factory=list)

    _normalize_strings = field_validator(
        "tracking_number",
        "tracking_url_provider",
        "tracking_status",
        "label_url",
        mode="before",
    )(_none_to_empty)
    _normalize_eta = field_validator("eta", mode="before")(_blank_to_none)


class TrackingStatusPayload(ShippoBaseModel):
    status: str = "UNKNOWN"
    status_details: str = ""
    status_date: datetime | None = None

    _normalize_details = field_validator("status_details", mode="before")(_none_to_empty)
    _normalize_date = field_validator("status_date", mode="before")(_blank_to_none)


class TrackResponse(ShippoBaseModel):
    carrier: str = ""
    tracking_number: str = ""
    eta: datetime | None = None
    tracking_status: TrackingStatusPayload | None = None
    tracking_history: list[TrackingStatusPayload] = Field(default_factory=list)

    _normalize_eta = field_validator("eta", mode="before")(_blank_to_none)


class CarrierAccountPayload(ShippoBaseModel):
    object_id: str
    carrier: str
    active: bool = True


class CarrierAccountsPage(ShippoBaseModel):
    next: str | None = None
    results: list[CarrierAccountPayload] = Field(default_factory=list)


class PickupResponse(ShippoBaseModel):
    object_id: str
    status: str = ""
    confirmation_code: str | None = None
    confirmed_start_time: datetime | None = None
    confirmed_end_time: datetime | None = None
    cancel_by_time: datetime | None = None
    messages: list[ShippoMessage] = Field(default_factory=list)

    _normalize_times = field_validator(
        "confirmed_start_time",
        "confirmed_end_time",
        "cancel_by_time",
        mode="before",
    )(_blank_to_none)
