"""Build carrier label requests and pick the rate to buy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from shipsync.domain.errors import ShipmentDataError
from shipsync.domain.model import ShipmentStatus, normalize_country
from shipsync.domain.ports import (
    CustomsDeclaration,
    CustomsItem,
    Parcel,
    PostalAddress,
    ShipmentRequest,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shipsync.config import ShippingConfig
    from shipsync.domain.model import OutboundShipment
    from shipsync.domain.ports import Label, Rate

log = getLogger(__name__)

DOMESTIC_COUNTRY: Final = "US"
_REQUIRED_RECIPIENT_FIELDS: Final = ("name", "street_1", "city", "zipcode", "country")


def prepare_recipient(shipment: OutboundShipment, config: ShippingConfig) -> None:
    """Normalise the recipient in place so the carrier accepts the address."""

    shipment.country = normalize_country(shipment.country)
    if not shipment.phone.strip():
        shipment.phone = config.office.phone

    missing = [name for name in _REQUIRED_RECIPIENT_FIELDS if not getattr(shipment, name).strip()]
    if missing:
        raise ShipmentDataError(
            f"Shipment {shipment.id} is missing {', '.join(missing)}; cannot request a label"
        )


def parse_quantity(line: str) -> int:
    """Read the ``N x`` prefix of a contents line, defaulting to one item."""

    prefix, separator, _ = line.partition(" x ")
    if not separator:
        return 1
    try:
        quantity = int(prefix.strip())
    except ValueError:
        raise ShipmentDataError(f"Malformed contents line: {line!r}") from None
    if quantity < 1:
        raise ShipmentDataError(f"Contents line has a non-positive quantity: {line!r}")
    return quantity


def build_customs(shipment: OutboundShipment, config: ShippingConfig) -> CustomsDeclaration:
    defaults = config.customs
    items = tuple(
        CustomsItem(
            description=line,
            quantity=parse_quantity(line),
            net_weight=defaults.net_weight,
            mass_unit=defaults.mass_unit,
            value_amount=defaults.value_amount,
            value_currency=defaults.value_currency,
            origin_country=defaults.origin_country,
        )
        for line in (raw.strip() for raw in shipment.contents.splitlines())
        if line
    )
    if not items:
        raise ShipmentDataError(
            f"Shipment {shipment.id} goes abroad but lists no contents for customs"
        )
    return CustomsDeclaration(
        certify_signer=config.customs_signer,
        certify=True,
        contents_explanation=shipment.contents,
        items=items,
        non_delivery_option=defaults.non_delivery_option,
        contents_type=defaults.contents_type,
        eel_pfc=defaults.eel_pfc,
    )


def office_address(config: ShippingConfig) -> PostalAddress:
    office = config.office
    return PostalAddress(
        name=office.company,
        company=office.company,
        street_1=office.street_1,
        street_2=office.street_2,
        city=office.city,
        state=office.state,
        zipcode=office.zipcode,
        country=office.country,
        phone=office.phone,
        email=config.sender_email,
    )


def build_shipment_request(shipment: OutboundShipment, config: ShippingConfig) -> ShipmentRequest:
    prepare_recipient(shipment, config)

    recipient = PostalAddress(
        name=shipment.name,
        street_1=shipment.street_1,
        street_2=shipment.street_2,
        city=shipment.city,
        state=shipment.state,
        zipcode=shipment.zipcode,
        country=shipment.country,
        phone=shipment.phone,
        email=shipment.email,
    )
    parcel = config.parcel
    customs = build_customs(shipment, config) if shipment.country != DOMESTIC_COUNTRY else None
    return ShipmentRequest(
        sender=office_address(config),
        recipient=recipient,
        parcels=(
            Parcel(
                length=parcel.length,
                width=parcel.width,
                height=parcel.height,
                distance_unit=parcel.distance_unit,
                weight=parcel.weight,
                mass_unit=parcel.mass_unit,
                metadata=parcel.metadata,
            ),
        ),
        customs=customs,
    )


def select_rate(rates: Sequence[Rate], preferences: Sequence[str]) -> Rate | None:
    """Return the first rate tagged with the most preferred attribute.

    Rates without a preferred tag are never chosen; with no match the caller
    leaves the shipment unlabelled.
    """

    for tag in preferences:
        for rate in rates:
            if tag in rate.attributes:
                return rate
    return None


def apply_label(shipment: OutboundShipment, rate: Rate, label: Label, *, host: str) -> None:
    """Record a purchased label on ``shipment``.

    A failed purchase keeps the provider's status and messages but no transaction
    id, so the next pass asks for a label again.
    """

    shipment.carrier = rate.provider
    shipment.cost = rate.amount
    shipment.tracking_number = label.tracking_number
    shipment.tracking_link = label.tracking_url
    shipment.tracking_status = label.tracking_status
    shipment.label_link = label.label_url
    shipment.eta = label.eta
    shipment.refresh_links(host=host)

    if label.succeeded:
        shipment.carrier_shipment_id = label.transaction_id
        shipment.status = ShipmentStatus.LABEL_CREATED
        shipment.messages = ""
        return

    log.warning(
        "Label purchase for shipment %s returned %s: %s",
        shipment.id,
        label.status,
        "; ".join(label.messages),
    )
    shipment.status = label.status
    shipment.messages = "; ".join(label.messages)
