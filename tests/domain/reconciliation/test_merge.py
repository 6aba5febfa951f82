from __future__ import annotations

from dataclasses import fields
from datetime import UTC, datetime

import pytest

from shipsync.domain.model import InboundShipment, OutboundShipment, ShipmentStatus
from shipsync.domain.reconciliation import (
    INBOUND_POLICY,
    OUTBOUND_POLICY,
    MergePolicy,
    copy_shipment,
    merge,
    overlay_authority,
)
from tests.support.shipments import make_inbound, make_outbound

HOST = "track.example.org"


def test_every_field_has_a_policy() -> None:
    assert {f.name for f in fields(OutboundShipment)} == set(OUTBOUND_POLICY)
    assert {f.name for f in fields(InboundShipment)} == set(INBOUND_POLICY)


def test_merge_without_existing_copies_incoming() -> None:
    incoming = make_outbound(pickup_links=["recPickup"])

    merged = merge(incoming, None, tracking_host=HOST)

    assert merged is not incoming
    assert merged.email == incoming.email
    assert merged.pickup_links == ["recPickup"]
    assert merged.pickup_links is not incoming.pickup_links


def test_sticky_fields_keep_existing_values() -> None:
    existing = make_outbound(
        carrier="usps",
        tracking_number="9400100000000000000000",
        status=ShipmentStatus.SHIPPED,
        carrier_shipment_id="txn-1",
    )
    incoming = make_outbound(carrier="ups", tracking_number="1Z999", status=ShipmentStatus.QUEUED)

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.carrier == "usps"
    assert merged.tracking_number == "9400100000000000000000"
    assert merged.status == ShipmentStatus.SHIPPED
    assert merged.carrier_shipment_id == "txn-1"


def test_sticky_fields_fill_gaps() -> None:
    existing = make_outbound(tracking_number="")
    incoming = make_outbound(carrier="usps", tracking_number="9400100000000000000000")

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.tracking_number == "9400100000000000000000"
    assert merged.branded_tracking_link == f"https://{HOST}/usps/9400100000000000000000"
    assert merged.tracking_link.startswith("https://tools.usps.com/")


def test_intake_fields_prefer_populated_incoming_values() -> None:
    existing = make_outbound(street_1="OLD ST", phone="5550000")
    incoming = make_outbound(street_1="NEW ST", phone="")

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.street_1 == "NEW ST"
    assert merged.phone == "5550000"


def test_mirror_owned_fields_are_never_taken_from_incoming() -> None:
    existing = make_outbound(local_pickup=False, geocode_cache="cached")
    incoming = make_outbound(local_pickup=True, geocode_cache="other")

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.local_pickup is False
    assert merged.geocode_cache == "cached"


def test_inbound_name_and_notes_belong_to_the_mirror() -> None:
    existing = make_inbound(name="Monitors", notes="for the lab")
    incoming = make_inbound(name="Something else", notes="")

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.name == "Monitors"
    assert merged.notes == "for the lab"
    assert OUTBOUND_POLICY["name"] is MergePolicy.INCOMING
    assert INBOUND_POLICY["name"] is MergePolicy.AUTHORITY


def test_merge_keeps_existing_identity() -> None:
    existing = make_outbound(mirror_record_id="rec001")
    incoming = make_outbound()

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.id == existing.id
    assert merged.mirror_record_id == "rec001"


def test_merging_the_same_incoming_twice_changes_nothing() -> None:
    existing = make_outbound(
        carrier="usps",
        tracking_number="9400100000000000000000",
        status=ShipmentStatus.LABEL_CREATED,
        phone="5550000",
        mirror_record_id="rec001",
    )
    incoming = make_outbound(carrier="ups", street_1="NEW ST", phone="", pickup_links=["recA"])

    once = merge(incoming, existing, tracking_host=HOST)
    twice = merge(incoming, once, tracking_host=HOST)

    assert twice == once


def test_merge_rejects_mixed_directions() -> None:
    with pytest.raises(TypeError):
        merge(make_inbound(), make_outbound(), tracking_host=HOST)  # type: ignore[arg-type]


def test_merge_leaves_its_inputs_untouched() -> None:
    existing = make_outbound(pickup_links=["recA"])
    incoming = make_outbound(street_1="NEW ST")

    merged = merge(incoming, existing, tracking_host=HOST)
    merged.pickup_links.append("recB")

    assert existing.street_1 == "500 FOLSOM ST"
    assert existing.pickup_links == ["recA"]


def test_later_timestamps_never_replace_earlier_ones() -> None:
    first = datetime(2025, 6, 3, 9, tzinfo=UTC)
    existing = make_outbound(shipped_time=first)
    incoming = make_outbound(shipped_time=datetime(2025, 6, 4, 9, tzinfo=UTC))

    merged = merge(incoming, existing, tracking_host=HOST)

    assert merged.shipped_time == first


def test_overlay_authority_takes_mirror_columns() -> None:
    stored = make_outbound(local_pickup=False, pickup_links=[])
    mirror_record = make_outbound(
        local_pickup=True,
        pickup_links=["recPickup"],
        street_1="EDITED BY HAND",
        mirror_record_id="rec042",
    )

    overlaid = overlay_authority(stored, mirror_record)

    assert overlaid.local_pickup is True
    assert overlaid.pickup_links == ["recPickup"]
    assert overlaid.street_1 == stored.street_1
    assert overlaid.mirror_record_id == "rec042"


def test_overlay_authority_without_mirror_is_a_copy() -> None:
    stored = make_outbound()

    overlaid = overlay_authority(stored, None)

    assert overlaid == stored
    assert overlaid is not stored


def test_copy_shipment_detaches_lists() -> None:
    original = make_outbound(pickup_links=["recA"])

    copied = copy_shipment(original)
    copied.pickup_links.append("recB")

    assert original.pickup_links == ["recA"]
