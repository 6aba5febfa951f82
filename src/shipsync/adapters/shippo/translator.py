"""Translate between carrier port values and Shippo payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipsync.domain.ports import (
    CarrierAccount,
    Label,
    PickupConfirmation,
    Rate,
    TrackingEvent,
    TrackingStatus,
)

from .schema import TrackingStatusPayload

if TYPE_CHECKING:
    from shipsync.domain.ports import CustomsItem, Parcel, PickupRequest, PostalAddress

    from .schema import (
        CarrierAccountPayload,
        PickupResponse,
        RatePayload,
        TrackResponse,
        TransactionResponse,
    )


def address_payload(address: PostalAddress) -> dict[str, str]:
    return {
        "name": address.name,
        "company": address.company,
        "street1": address.street_1,
        "street2": address.street_2,
        "city": address.city,
        "state": address.state,
        "zip": address.zipcode,
        "country": address.country,
        "phone": address.phone,
        "email": address.email,
    }


def parcel_payload(parcel: Parcel) -> dict[str, str]:
    return {
        "length": parcel.length,
        "width": parcel.width,
        "height": parcel.height,
        "distance_unit": parcel.distance_unit,
        "weight": parcel.weight,
        "mass_unit": parcel.mass_unit,
        "metadata": parcel.metadata,
    }


def customs_item_payload(item: CustomsItem) -> dict[str, object]:
    return {
        "description": item.description,
        "quantity": item.quantity,
        "net_weight": item.net_weight,
        "mass_unit": item.mass_unit,
        "value_amount": item.value_amount,
        "value_currency": item.value_currency,
        "origin_country": item.origin_country,
    }


def pickup_payload(request: PickupRequest) -> dict[str, object]:
    return {
        "carrier_account": request.carrier_account_id,
        "location": {
            "building_location_type": request.building_location_type,
            "building_type": request.building_type,
            "instructions": request.instructions,
            "address": address_payload(request.address),
        },
        "transactions": list(request.transactions),
        "requested_start_time": request.requested_start_time.isoformat(),
        "requested_end_time": request.requested_end_time.isoformat(),
        "metadata": request.metadata,
    }


def parse_rate(payload: RatePayload) -> Rate:
    # amount_local is the price in the account's currency when Shippo converted it
    amount = payload.amount_local if payload.amount_local is not None else payload.amount
    return Rate(
        rate_id=payload.object_id,
        provider=payload.provider,
        amount=amount,
        currency=payload.currency,
        attributes=frozenset(payload.attributes),
        service_level=payload.servicelevel.name,
    )


def parse_label(payload: TransactionResponse) -> Label:
    return Label(
        transaction_id=payload.object_id,
        status=payload.status,
        tracking_number=payload.tracking_number,
        tracking_url=payload.tracking_url_provider,
        tracking_status=payload.tracking_status,
        label_url=payload.label_url,
        eta=payload.eta,
        messages=tuple(message.render() for message in payload.messages),
    )


def _parse_event(payload: TrackingStatusPayload) -> TrackingEvent:
    return TrackingEvent(
        status=payload.status,
        status_date=payload.status_date,
        status_details=payload.status_details,
    )


def parse_tracking_status(
    payload: TrackResponse, *, carrier: str, tracking_number: str
) -> TrackingStatus:
    current = payload.tracking_status or TrackingStatusPayload()
    return TrackingStatus(
        carrier=payload.carrier or carrier,
        tracking_number=payload.tracking_number or tracking_number,
        status=current.status,
        status_details=current.status_details,
        status_date=current.status_date,
        eta=payload.eta,
        history=tuple(_parse_event(event) for event in payload.tracking_history),
    )


def parse_carrier_account(payload: CarrierAccountPayload) -> CarrierAccount:
    return CarrierAccount(
        account_id=payload.object_id, carrier=payload.carrier, active=payload.active
    )


def parse_pickup(payload: PickupResponse) -> PickupConfirmation:
    return PickupConfirmation(
        pickup_id=payload.object_id,
        status=payload.status,
        confirmation_code=payload.confirmation_code or "",
        confirmed_start_time=payload.confirmed_start_time,
        confirmed_end_time=payload.confirmed_end_time,
        cancel_by_time=payload.cancel_by_time,
        messages=tuple(message.render() for message in payload.messages),
    )
