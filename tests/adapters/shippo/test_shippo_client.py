from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import httpx
import pytest

from shipsync.adapters.shippo import CarrierAPIError, ShippoGateway
from shipsync.config import ResilienceConfig, ShippoConfig
from shipsync.config.shippo import SHIPPO_BASE_URL
from shipsync.domain.ports import PickupRequest
from shipsync.domain.reconciliation import build_shipment_request
from shipsync.domain.reconciliation.labels import office_address
from tests.support.http import RecordingHandler, make_client_factory
from tests.support.shipments import make_outbound, make_rate, make_shipping_config

CONFIG = ShippoConfig(
    api_token="shippo_test_token",
    resilience=ResilienceConfig(name="shippo", base_url=SHIPPO_BASE_URL),
)

SHIPMENT_RESPONSE = {
    "object_id": "shipment-1",
    "status": "SUCCESS",
    "rates": [
        {
            "object_id": "rate-1",
            "provider": "USPS",
            "amount": "7.50",
            "amount_local": "7.10",
            "currency": "USD",
            "attributes": ["BESTVALUE", "CHEAPEST"],
            "servicelevel": {"name": "Priority Mail", "token": "usps_priority"},
        },
        {
            "object_id": "rate-2",
            "provider": "UPS",
            "amount": "12.00",
            "amount_local": "",
            "currency": "USD",
            "attributes": [],
            "servicelevel": {"name": "Ground", "token": "ups_ground"},
        },
    ],
    "messages": [],
}


def _gateway(handler: RecordingHandler) -> ShippoGateway:
    return ShippoGateway.from_config(CONFIG, client_factory=make_client_factory(handler))


def test_quote_domestic_shipment() -> None:
    handler = RecordingHandler(httpx.Response(201, json=SHIPMENT_RESPONSE))
    request = build_shipment_request(make_outbound(), make_shipping_config())

    rates = asyncio.run(_gateway(handler).quote(request))

    sent = handler.requests[0]
    assert sent.method == "POST"
    assert sent.url.path == "/shipments/"
    assert sent.headers["Authorization"] == "ShippoToken shippo_test_token"
    body = handler.body()
    assert body["async"] is False
    assert "customs_declaration" not in body
    address_to = body["address_to"]
    assert isinstance(address_to, dict)
    assert address_to["street1"] == "500 FOLSOM ST"
    assert address_to["zip"] == "94105"

    assert [rate.rate_id for rate in rates] == ["rate-1", "rate-2"]
    assert rates[0].amount == pytest.approx(7.10)
    assert rates[0].attributes == frozenset({"BESTVALUE", "CHEAPEST"})
    assert rates[0].service_level == "Priority Mail"
    assert rates[1].amount == pytest.approx(12.0)


def test_quote_international_shipment_registers_customs_items() -> None:
    handler = RecordingHandler(
        httpx.Response(201, json={"object_id": "item-1"}),
        httpx.Response(201, json={"object_id": "item-2"}),
        httpx.Response(201, json=SHIPMENT_RESPONSE),
    )
    shipment = make_outbound(country="GB", contents="1 x Hoodie, Size: M\n2 x Fleece, Size: S")
    request = build_shipment_request(shipment, make_shipping_config())

    asyncio.run(_gateway(handler).quote(request))

    assert [sent.url.path for sent in handler.requests] == [
        "/customs/items/",
        "/customs/items/",
        "/shipments/",
    ]
    assert handler.body(1)["quantity"] == 2
    customs = handler.body()["customs_declaration"]
    assert isinstance(customs, dict)
    assert customs["items"] == ["item-1", "item-2"]
    assert customs["certify_signer"] == "Pat Doe"
    assert customs["eel_pfc"] == "NOEEI_30_37_a"


def test_purchase_label() -> None:
    handler = RecordingHandler(
        httpx.Response(
            201,
            json={
                "object_id": "txn-1",
                "status": "SUCCESS",
                "tracking_number": "9400100000000000000000",
                "tracking_url_provider": "https://tools.usps.com/go/Track?9400",
                "tracking_status": None,
                "label_url": "https://labels.example/txn-1.pdf",
                "eta": "2025-06-05T12:00:00Z",
                "messages": [],
            },
        )
    )

    label = asyncio.run(_gateway(handler).purchase_label(make_rate("rate-1", "BESTVALUE")))

    assert handler.body() == {"rate": "rate-1", "async": False, "label_file_type": "PDF_4x6"}
    assert label.succeeded
    assert label.transaction_id == "txn-1"
    assert label.tracking_status == ""
    assert label.eta == datetime(2025, 6, 5, 12, tzinfo=UTC)


def test_failed_purchase_keeps_messages() -> None:
    handler = RecordingHandler(
        httpx.Response(
            201,
            json={
                "object_id": "txn-2",
                "status": "ERROR",
                "messages": [
                    {"source": "USPS", "code": "", "text": "Address not found"},
                    {"text": "Try again"},
                ],
            },
        )
    )

    label = asyncio.run(_gateway(handler).purchase_label(make_rate()))

    assert not label.succeeded
    assert label.messages == ("USPS: Address not found", "Try again")


def test_get_tracking_status() -> None:
    handler = RecordingHandler(
        httpx.Response(
            200,
            json={
                "carrier": "usps",
                "tracking_number": "9400100000000000000000",
                "eta": "2025-06-05T00:00:00Z",
                "tracking_status": {
                    "status": "TRANSIT",
                    "status_details": "Arrived at facility",
                    "status_date": "2025-06-03T15:00:00Z",
                },
                "tracking_history": [
                    {
                        "status": "PRE_TRANSIT",
                        "status_details": None,
                        "status_date": "2025-06-02T15:00:00Z",
                    },
                ],
            },
        )
    )

    status = asyncio.run(
        _gateway(handler).get_tracking_status("usps", "9400100000000000000000")
    )

    assert handler.requests[0].method == "GET"
    assert handler.requests[0].url.path == "/tracks/usps/9400100000000000000000"
    assert status.status == "TRANSIT"
    assert status.status_details == "Arrived at facility"
    assert status.status_date == datetime(2025, 6, 3, 15, tzinfo=UTC)
    assert status.eta == datetime(2025, 6, 5, tzinfo=UTC)
    assert status.history[0].status == "PRE_TRANSIT"
    assert status.history[0].status_details == ""


def test_tracking_without_status_is_unknown() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"tracking_status": None}))

    status = asyncio.run(_gateway(handler).get_tracking_status("dhl_express", "123"))

    assert status.status == "UNKNOWN"
    assert status.carrier == "dhl_express"
    assert status.tracking_number == "123"


def test_register_tracking_webhook() -> None:
    handler = RecordingHandler(httpx.Response(201, json={"tracking_number": "9400"}))

    asyncio.run(_gateway(handler).register_tracking_webhook("usps", "9400"))

    assert handler.requests[0].url.path == "/tracks/"
    assert handler.body() == {"carrier": "usps", "tracking_number": "9400"}


def test_list_carrier_accounts_follows_pages() -> None:
    handler = RecordingHandler(
        httpx.Response(
            200,
            json={
                "next": "https://api.goshippo.com/carrier_accounts/?page=2&results=100",
                "results": [{"object_id": "acct-ups", "carrier": "ups", "active": True}],
            },
        ),
        httpx.Response(
            200,
            json={
                "next": None,
                "results": [{"object_id": "acct-usps", "carrier": "usps", "active": True}],
            },
        ),
    )

    accounts = asyncio.run(_gateway(handler).list_carrier_accounts())

    assert [account.account_id for account in accounts] == ["acct-ups", "acct-usps"]
    assert handler.requests[0].url.params["results"] == "100"
    assert handler.requests[1].url.params["page"] == "2"


def test_create_pickup() -> None:
    handler = RecordingHandler(
        httpx.Response(
            201,
            json={
                "object_id": "pickup-1",
                "status": "CONFIRMED",
                "confirmation_code": "WTC123",
                "confirmed_start_time": "2025-06-09T15:59:59Z",
                "confirmed_end_time": "2025-06-09T23:59:59Z",
                "cancel_by_time": "",
                "messages": [],
            },
        )
    )
    config = make_shipping_config()
    request = PickupRequest(
        carrier_account_id="acct-usps",
        address=office_address(config),
        transactions=("txn-1", "txn-2"),
        requested_start_time=datetime(2025, 6, 9, 15, 59, 59, tzinfo=UTC),
        requested_end_time=datetime(2025, 6, 9, 23, 59, 59, tzinfo=UTC),
        instructions=config.pickup_instructions,
    )

    confirmation = asyncio.run(_gateway(handler).create_pickup(request))

    body = handler.body()
    assert body["carrier_account"] == "acct-usps"
    assert body["transactions"] == ["txn-1", "txn-2"]
    assert body["requested_start_time"] == "2025-06-09T15:59:59+00:00"
    location = body["location"]
    assert isinstance(location, dict)
    assert location["building_location_type"] == "Office"
    assert location["address"]["company"] == "Example Labs"
    assert confirmation.pickup_id == "pickup-1"
    assert confirmation.confirmation_code == "WTC123"
    assert confirmation.cancel_by_time is None


def test_http_errors_become_carrier_api_errors() -> None:
    handler = RecordingHandler(httpx.Response(401, json={"detail": "Invalid token"}))

    with pytest.raises(CarrierAPIError) as exc:
        asyncio.run(_gateway(handler).purchase_label(make_rate()))

    assert exc.value.status_code == 401
    assert "Invalid token" in str(exc.value)


def test_unexpected_payload_becomes_carrier_api_error() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"rates": "nope"}))
    request = build_shipment_request(make_outbound(), make_shipping_config())

    with pytest.raises(CarrierAPIError):
        asyncio.run(_gateway(handler).quote(request))
