"""Port for the carrier API: rates, labels, tracking and pickups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

LABEL_SUCCESS = "SUCCESS"


@dataclass(frozen=True, slots=True)
class PostalAddress:
    name: str
    street_1: str
    city: str
    state: str
    zipcode: str
    country: str
    street_2: str = ""
    company: str = ""
    phone: str = ""
    email: str = ""


@dataclass(frozen=True, slots=True)
class Parcel:
    length: str
    width: str
    height: str
    distance_unit: str
    weight: str
    mass_unit: str
    metadata: str = ""


@dataclass(frozen=True, slots=True)
class CustomsItem:
    description: str
    quantity: int
    net_weight: str
    mass_unit: str
    value_amount: str
    value_currency: str
    origin_country: str


@dataclass(frozen=True, slots=True)
class CustomsDeclaration:
    certify_signer: str
    contents_explanation: str
    items: tuple[CustomsItem, ...]
    non_delivery_option: str
    contents_type: str
    eel_pfc: str
    certify: bool = True


@dataclass(frozen=True, slots=True)
class ShipmentRequest:
    sender: PostalAddress
    recipient: PostalAddress
    parcels: tuple[Parcel, ...]
    customs: CustomsDeclaration | None = None


@dataclass(frozen=True, slots=True)
class Rate:
    rate_id: str
    provider: str
    amount: float
    currency: str = "USD"
    attributes: frozenset[str] = frozenset()
    service_level: str = ""


@dataclass(frozen=True, slots=True)
class Label:
    """Outcome of buying a label for a selected rate."""

    transaction_id: str
    status: str
    tracking_number: str = ""
    tracking_url: str = ""
    tracking_status: str = ""
    label_url: str = ""
    eta: datetime | None = None
    messages: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == LABEL_SUCCESS


@dataclass(frozen=True, slots=True)
class TrackingEvent:
    status: str
    status_date: datetime | None = None
    status_details: str = ""


@dataclass(frozen=True, slots=True)
class TrackingStatus:
    carrier: str
    tracking_number: str
    status: str = "UNKNOWN"
    status_details: str = ""
    status_date: datetime | None = None
    eta: datetime | None = None
    history: tuple[TrackingEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class CarrierAccount:
    account_id: str
    carrier: str
    active: bool = True


@dataclass(frozen=True, slots=True)
class PickupRequest:
    carrier_account_id: str
    address: PostalAddress
    transactions: tuple[str, ...]
    requested_start_time: datetime
    requested_end_time: datetime
    building_location_type: str = "Office"
    building_type: str = "building"
    instructions: str = ""
    metadata: str = ""


@dataclass(frozen=True, slots=True)
class PickupConfirmation:
    pickup_id: str
    status: str
    confirmation_code: str = ""
    confirmed_start_time: datetime | None = None
    confirmed_end_time: datetime | None = None
    cancel_by_time: datetime | None = None
    messages: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class CarrierGateway(Protocol):
    """Carrier API surface used by reconciliation and pickup scheduling."""

    async def quote(self, request: ShipmentRequest) -> list[Rate]: ...

    async def purchase_label(self, rate: Rate) -> Label: ...

    async def get_tracking_status(self, carrier: str, tracking_number: str) -> TrackingStatus: ...

    async def register_tracking_webhook(self, carrier: str, tracking_number: str) -> None: ...

    async def list_carrier_accounts(self) -> list[CarrierAccount]: ...

    async def create_pickup(self, request: PickupRequest) -> PickupConfirmation: ...
