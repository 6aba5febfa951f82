"""Shipping office, parcel and customs defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_list, optional_env_var, require_env_vars

DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_RATE_PREFERENCES = ("BESTVALUE", "CHEAPEST")
DEFAULT_PICKUP_INSTRUCTIONS = "Knock on the door and someone will bring the packages out."


@dataclass(frozen=True, slots=True)
class ParcelDefaults:
    length: str = "12"
    width: str = "12"
    height: str = "6"
    distance_unit: str = "in"
    weight: str = "1"
    mass_unit: str = "lb"
    metadata: str = "Default box for swag"


@dataclass(frozen=True, slots=True)
class CustomsDefaults:
    net_weight: str = "0.25"
    mass_unit: str = "lb"
    value_amount: str = "100.00"
    value_currency: str = "USD"
    origin_country: str = "US"
    non_delivery_option: str = "RETURN"
    contents_type: str = "GIFT"
    eel_pfc: str = "NOEEI_30_37_a"


@dataclass(frozen=True, slots=True)
class OfficeAddress:
    company: str
    street_1: str
    city: str
    state: str
    zipcode: str
    country: str
    phone: str
    street_2: str = ""


@dataclass(frozen=True, slots=True)
class ShippingConfig:
    """Everything the shipment workflow needs to know about the sending office."""

    domain: str
    office: OfficeAddress
    customs_signer: str
    timezone: str = DEFAULT_TIMEZONE
    pickup_instructions: str = DEFAULT_PICKUP_INSTRUCTIONS
    rate_preferences: tuple[str, ...] = DEFAULT_RATE_PREFERENCES
    parcel: ParcelDefaults = field(default_factory=ParcelDefaults)
    customs: CustomsDefaults = field(default_factory=CustomsDefaults)

    @property
    def sender_email(self) -> str:
        return f"packages@{self.domain}"

    @property
    def tracking_host(self) -> str:
        return f"track.{self.domain}"


def get_shipping_config() -> ShippingConfig:
    values = require_env_vars(
        (
            "SHIPPING_DOMAIN",
            "SHIPPING_COMPANY",
            "SHIPPING_STREET_1",
            "SHIPPING_CITY",
            "SHIPPING_STATE",
            "SHIPPING_ZIPCODE",
            "SHIPPING_PHONE",
            "SHIPPING_CUSTOMS_SIGNER",
        )
    )
    office = OfficeAddress(
        company=values["SHIPPING_COMPANY"],
        street_1=values["SHIPPING_STREET_1"],
        street_2=optional_env_var("SHIPPING_STREET_2", ""),
        city=values["SHIPPING_CITY"],
        state=values["SHIPPING_STATE"],
        zipcode=values["SHIPPING_ZIPCODE"],
        country=optional_env_var("SHIPPING_COUNTRY", "US"),
        phone=values["SHIPPING_PHONE"],
    )
    preferences = env_list(optional_env_var("SHIPPING_RATE_PREFERENCES", ""))
    return ShippingConfig(
        domain=values["SHIPPING_DOMAIN"],
        office=office,
        customs_signer=values["SHIPPING_CUSTOMS_SIGNER"],
        timezone=optional_env_var("SHIPPING_TIMEZONE", DEFAULT_TIMEZONE),
        pickup_instructions=optional_env_var(
            "SHIPPING_PICKUP_INSTRUCTIONS", DEFAULT_PICKUP_INSTRUCTIONS
        ),
        rate_preferences=preferences or DEFAULT_RATE_PREFERENCES,
    )
