from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime

import httpx
import pytest

from shipsync.adapters.airtable import AirtableMirrors, MirrorAPIError, build_airtable_mirrors
from shipsync.adapters.airtable.translator import key_formula, shipment_fields
from shipsync.config import AirtableConfig, ResilienceConfig
from shipsync.config.airtable import AIRTABLE_BASE_URL
from shipsync.domain.model import Direction, PackagePickup, ShipmentStatus
from tests.support.http import RecordingHandler, make_client_factory
from tests.support.shipments import CREATED, make_inbound, make_outbound

CONFIG = AirtableConfig(
    api_key="airtable_key",
    base_id="appShipments",
    resilience=ResilienceConfig(name="airtable", base_url=AIRTABLE_BASE_URL),
)

OUTBOUND_RECORD = {
    "id": "rec001",
    "createdTime": "2025-06-02T17:31:00.000Z",
    "fields": {
        "name": "Alex Kim",
        "email": "alex@example.com",
        "street_1": "500 FOLSOM ST",
        "shippo_id": "txn-1",
        "label_link": [
            {"id": "att1", "url": "https://labels.example/txn-1.pdf", "filename": "label.pdf"}
        ],
        "link_to_package_pickup": ["recPickup"],
        "local_pickup": True,
        "status": "Label printed",
        "cost": 7.5,
        "latitude": None,
        "pickup_date": "2025-06-09",
        "created_time": "2025-06-02T17:30:00.000Z",
    },
}


def _mirrors(handler: RecordingHandler) -> AirtableMirrors:
    return build_airtable_mirrors(CONFIG, client_factory=make_client_factory(handler))


def test_get_by_record_id_parses_mirror_columns() -> None:
    handler = RecordingHandler(httpx.Response(200, json=OUTBOUND_RECORD))

    shipment = asyncio.run(
        _mirrors(handler).outbound.get(("alex@example.com", CREATED), record_id="rec001")
    )

    request = handler.requests[0]
    assert request.url.path == "/v0/appShipments/Outbound/rec001"
    assert request.headers["Authorization"] == "Bearer airtable_key"
    assert shipment is not None
    assert shipment.mirror_record_id == "rec001"
    assert shipment.carrier_shipment_id == "txn-1"
    assert shipment.label_link == "https://labels.example/txn-1.pdf"
    assert shipment.pickup_links == ["recPickup"]
    assert shipment.local_pickup is True
    assert shipment.status == ShipmentStatus.LABEL_PRINTED
    assert shipment.latitude == 0.0
    assert shipment.pickup_date == date(2025, 6, 9)
    assert shipment.created_time == CREATED


def test_missing_record_falls_back_to_key_search() -> None:
    handler = RecordingHandler(
        httpx.Response(404, json={"error": "NOT_FOUND"}),
        httpx.Response(200, json={"records": []}),
    )

    shipment = asyncio.run(
        _mirrors(handler).outbound.get(("alex@example.com", CREATED), record_id="recGone")
    )

    assert shipment is None
    search = handler.requests[1]
    assert search.url.path == "/v0/appShipments/Outbound"
    assert search.url.params["maxRecords"] == "1"
    assert search.url.params["filterByFormula"] == (
        "AND(LOWER({email}) = 'alex@example.com', "
        "IS_SAME({created_time}, '2025-06-02T17:30:00+00:00', 'second'))"
    )


def test_incomplete_key_skips_search() -> None:
    handler = RecordingHandler()

    shipment = asyncio.run(_mirrors(handler).outbound.get(("alex@example.com", None)))

    assert shipment is None
    assert handler.requests == []


def test_record_without_status_or_creation_time() -> None:
    record = {
        "id": "rec009",
        "createdTime": "2025-06-03T08:00:00.000Z",
        "fields": {"carrier": "ups", "tracking_number": "1Z999", "name": "Chairs"},
    }
    handler = RecordingHandler(httpx.Response(200, json={"records": [record]}))

    records = asyncio.run(_mirrors(handler).inbound.records())

    assert len(records) == 1
    assert records[0].status == ShipmentStatus.QUEUED
    assert records[0].created_time == datetime(2025, 6, 3, 8, tzinfo=UTC)
    assert records[0].natural_key == ("ups", "1Z999")


def test_records_follow_offsets() -> None:
    handler = RecordingHandler(
        httpx.Response(200, json={"records": [OUTBOUND_RECORD], "offset": "itrNext"}),
        httpx.Response(200, json={"records": [{**OUTBOUND_RECORD, "id": "rec002"}]}),
    )

    records = asyncio.run(_mirrors(handler).outbound.records())

    assert [record.mirror_record_id for record in records] == ["rec001", "rec002"]
    assert handler.requests[0].url.params["pageSize"] == "100"
    assert handler.requests[1].url.params["offset"] == "itrNext"


def test_write_new_record_posts_computed_fields_only() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"id": "rec123", "fields": {}}))
    shipment = make_outbound(
        label_link="https://labels.example/txn-1.pdf",
        carrier_shipment_id="txn-1",
        local_pickup=True,
        pickup_links=["recPickup"],
        geocode_cache="cached",
    )

    record_id = asyncio.run(_mirrors(handler).outbound.write(shipment))

    assert record_id == "rec123"
    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v0/appShipments/Outbound"
    body = handler.body()
    assert body["typecast"] is True
    fields = body["fields"]
    assert isinstance(fields, dict)
    assert fields["shippo_id"] == "txn-1"
    assert fields["label_link"] == [{"url": "https://labels.example/txn-1.pdf"}]
    assert fields["created_time"] == "2025-06-02T17:30:00+00:00"
    assert fields["status"] == "Queued"
    for owned in ("local_pickup", "link_to_package_pickup", "geocode_cache", "id"):
        assert owned not in fields
    assert "eta" not in fields


def test_write_existing_record_patches() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"id": "rec001"}))

    asyncio.run(_mirrors(handler).outbound.write(make_outbound(mirror_record_id="rec001")))

    assert handler.requests[0].method == "PATCH"
    assert handler.requests[0].url.path == "/v0/appShipments/Outbound/rec001"


def test_inbound_write_is_limited_to_inbound_columns() -> None:
    fields = shipment_fields(
        make_inbound(email="someone@example.com", status=ShipmentStatus.SHIPPED, notes="hands off")
    )

    assert fields["tracking_number"] == "1Z999AA10123456784"
    assert fields["status"] == "Shipped"
    assert "email" not in fields
    assert "name" not in fields
    assert "notes" not in fields


def test_pickup_mirror_writes_links_to_shipments() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"id": "recPick"}))
    pickup = PackagePickup(
        carrier_pickup_id="pickup-1",
        carrier="usps",
        status="CONFIRMED",
        transactions=["txn-1"],
        shipment_record_ids=["rec001"],
        requested_start_time=datetime(2025, 6, 9, 15, 59, 59, tzinfo=UTC),
    )

    record_id = asyncio.run(_mirrors(handler).pickups.write_pickup(pickup))

    assert record_id == "recPick"
    assert handler.requests[0].url.raw_path == b"/v0/appShipments/Package%20Pickups"
    fields = handler.body()["fields"]
    assert isinstance(fields, dict)
    assert fields["shippo_id"] == "pickup-1"
    assert fields["link_to_outbound_shipments"] == ["rec001"]
    assert fields["requested_start_time"] == "2025-06-09T15:59:59+00:00"
    assert "cancel_by_time" not in fields


def test_key_formula_escapes_quotes() -> None:
    formula = key_formula(Direction.INBOUND, ("UPS", "1Z'99"))

    assert formula == "AND(LOWER({carrier}) = 'ups', LOWER({tracking_number}) = '1z\\'99')"


def test_key_formula_rejects_unknown_keys() -> None:
    with pytest.raises(TypeError):
        key_formula(Direction.OUTBOUND, "alex@example.com")


def test_server_errors_become_mirror_errors() -> None:
    handler = RecordingHandler(httpx.Response(503, text="Service Unavailable"))

    with pytest.raises(MirrorAPIError) as exc:
        asyncio.run(_mirrors(handler).outbound.records())

    assert exc.value.status_code == 503
