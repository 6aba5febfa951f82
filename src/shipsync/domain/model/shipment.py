"""Shipment records exchanged between intake, the database, the mirror and the carrier.

Both directions share one shape. They differ only in how a record is identified
before the repository has assigned it a surrogate id:

* outbound shipments are keyed by ``(email, created_time)``, the person who asked
  for a package and the moment the intake form was submitted;
* inbound shipments are keyed by ``(carrier, tracking_number)``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import ClassVar, Final
from uuid import UUID, uuid4

from .enums import TERMINAL_STATUSES, Direction, ShipmentStatus

type OutboundKey = tuple[str, datetime | None]
type InboundKey = tuple[str, str]

CARRIER_TRACKING_URLS: Final[dict[str, str]] = {
    "usps": "https://tools.usps.com/go/TrackConfirmAction_input?origTrackNum={}",
    "ups": "https://www.ups.com/track?tracknum={}",
    "fedex": "https://www.fedex.com/apps/fedextrack/?tracknumbers={}",
    "dhl": "https://www.dhl.com/en/express/tracking.html?AWB={}",
}

# Carrier tracking endpoints know DHL parcels under a more specific code.
_TRACKING_CARRIER_CODES: Final[dict[str, str]] = {"dhl": "dhl_express"}

_COUNTRY_NAMES: Final[dict[str, str]] = {"DE": "Germany", "GB": "Great Britain"}
_COUNTRY_CODES: Final[dict[str, str]] = {"GREAT BRITAIN": "GB", "UNITED STATES": "US"}


def branded_tracking_link(carrier: str, tracking_number: str, *, host: str) -> str:
    """Return the company-hosted tracking URL, or ``""`` while either part is unknown."""

    if not carrier or not tracking_number:
        return ""
    return f"https://{host}/{carrier}/{tracking_number}"


def carrier_tracking_link(carrier: str, tracking_number: str) -> str:
    template = CARRIER_TRACKING_URLS.get(carrier.strip().lower())
    if template is None or not tracking_number:
        return ""
    return template.format(tracking_number)


def _is_template_link(link: str) -> bool:
    prefixes = (template.partition("{}")[0] for template in CARRIER_TRACKING_URLS.values())
    return any(link.startswith(prefix) for prefix in prefixes)


def tracking_carrier_code(carrier: str) -> str:
    code = carrier.strip().lower()
    return _TRACKING_CARRIER_CODES.get(code, code)


def normalize_country(country: str) -> str:
    """Two-letter upper-case code for ``country``, mapping the spelled-out aliases."""

    upper = country.strip().upper()
    return _COUNTRY_CODES.get(upper, upper)


def country_display_name(country: str) -> str:
    stripped = country.strip()
    return _COUNTRY_NAMES.get(stripped.upper(), stripped)


@dataclass(kw_only=True)
class Shipment(ABC):
    """Common shape of inbound and outbound shipment records."""

    direction: ClassVar[Direction]

    id: UUID = field(default_factory=uuid4)
    mirror_record_id: str = ""

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
    carrier_shipment_id: str = ""

    status: str = ShipmentStatus.QUEUED
    local_pickup: bool = False
    notes: str = ""
    messages: str = ""
    pickup_date: date | None = None
    pickup_links: list[str] = field(default_factory=list)
    created_time: datetime | None = None

    @property
    @abstractmethod
    def natural_key(self) -> tuple[object, ...]:
        """Identity of the record before the repository assigns its surrogate id."""

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def needs_geocode(self) -> bool:
        return self.latitude == 0 and self.longitude == 0

    def format_address(self) -> str:
        street = self.street_1
        if self.street_2:
            street = f"{self.street_1}\n{self.street_2}"
        return f"{street}\n{self.city}, {self.state} {self.zipcode} {self.country}".strip()

    def geocode_query(self) -> str:
        """The formatted address with the country spelled out for the geocoder."""

        street = ", ".join(part for part in (self.street_1, self.street_2) if part)
        country = country_display_name(self.country)
        return f"{street}, {self.city}, {self.state} {self.zipcode} {country}".strip(" ,")

    def refresh_address(self) -> None:
        self.address_formatted = self.format_address()

    def refresh_links(self, *, host: str) -> None:
        """Recompute every link derived from ``(carrier, tracking_number)``."""

        self.branded_tracking_link = branded_tracking_link(
            self.carrier, self.tracking_number, host=host
        )
        template_link = carrier_tracking_link(self.carrier, self.tracking_number)
        if template_link:
            self.tracking_link = template_link
        elif not self.tracking_number or _is_template_link(self.tracking_link):
            # a template link left over from an earlier carrier or number
            self.tracking_link = ""

    def record_shipped(self, moment: datetime | None) -> None:
        """Move ``shipped_time`` to ``moment`` if it is earlier than what we know."""

        if moment is None:
            return
        if self.shipped_time is None or moment < self.shipped_time:
            self.shipped_time = moment

    def record_delivered(self, moment: datetime | None) -> None:
        if moment is None:
            return
        if self.delivered_time is None or moment < self.delivered_time:
            self.delivered_time = moment


@dataclass(kw_only=True)
class OutboundShipment(Shipment):
    """A package we send, created from an intake form submission."""

    direction: ClassVar[Direction] = Direction.OUTBOUND

    @property
    def natural_key(self) -> OutboundKey:
        return (self.email.strip().lower(), self.created_time)


@dataclass(kw_only=True)
class InboundShipment(Shipment):
    """A package addressed to us, discovered in the mirror by its tracking number."""

    direction: ClassVar[Direction] = Direction.INBOUND

    @property
    def natural_key(self) -> InboundKey:
        return (self.carrier.strip().lower(), self.tracking_number.strip())
