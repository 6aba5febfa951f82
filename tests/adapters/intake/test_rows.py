from __future__ import annotations

from datetime import UTC, datetime

import pytest

from shipsync.adapters.intake import discover_columns, parse_row, parse_sheet, parse_timestamp
from shipsync.adapters.sheets import SheetValues
from shipsync.domain.errors import IntakeError

HEADER = [
    "Timestamp",
    "Email Address",
    "Full Name",
    "Phone Number",
    "Street Address Line 1",
    "Street Address Line 2",
    "City",
    "State / Province",
    "Zipcode",
    "Country",
    "Hoodie Size",
    "Unisex Tee Size",
    "Women's Tee Size",
    "Sent?",
]


def _row() -> list[str]:
    values = {
        "Timestamp": "6/2/2025 9:30:00",
        "Email Address": "Alex@Example.com",
        "Full Name": "Alex Kim",
        "Phone Number": "",
        "Street Address Line 1": "500 Folsom St",
        "Street Address Line 2": "Apt 4",
        "City": "San Francisco",
        "State / Province": "ca",
        "Zipcode": "94105",
        "Country": "",
        "Hoodie Size": "M",
        "Unisex Tee Size": "N/A",
        "Women's Tee Size": "",
        "Sent?": "",
    }
    return [values[title] for title in HEADER]


def test_discover_columns_matches_titles_loosely() -> None:
    mapping = discover_columns(HEADER)

    assert mapping.timestamp == 0
    assert mapping.email == 1
    assert mapping.name == 2
    assert mapping.street_1 == 4
    assert mapping.street_2 == 5
    assert mapping.state == 7
    assert mapping.hoodie_size == 10
    assert mapping.womens_shirt_size == 12
    assert mapping.sent == 13
    assert mapping.carrier is None
    assert mapping.fleece_size is None


def test_discover_columns_first_match_wins() -> None:
    mapping = discover_columns(["Email", "Backup email"])

    assert mapping.email == 0


def test_parse_timestamp_converts_pacific_standard_time() -> None:
    assert parse_timestamp("6/2/2025 9:30:00") == datetime(2025, 6, 2, 17, 30, tzinfo=UTC)


def test_parse_timestamp_rejects_garbage() -> None:
    with pytest.raises(IntakeError):
        parse_timestamp("yesterday")


def test_parse_row_normalises_values() -> None:
    candidate = parse_row(discover_columns(HEADER), _row(), source_id="sheet-1")
    shipment = candidate.shipment

    assert candidate.fulfilled is False
    assert shipment.email == "alex@example.com"
    assert shipment.name == "Alex Kim"
    assert shipment.street_1 == "500 FOLSOM ST"
    assert shipment.street_2 == "APT 4"
    assert shipment.state == "CA"
    assert shipment.country == "US"
    assert shipment.contents == "1 x Hoodie, Size: M"
    assert shipment.created_time == datetime(2025, 6, 2, 17, 30, tzinfo=UTC)
    assert shipment.notes == "Automatically generated from the Google sheet sheet-1"


def test_parse_row_upper_cases_country() -> None:
    row = _row()
    row[HEADER.index("Country")] = "us"

    candidate = parse_row(discover_columns(HEADER), row)

    assert candidate.shipment.country == "US"


def test_parse_row_reads_sent_flag() -> None:
    row = _row()
    row[HEADER.index("Sent?")] = "TRUE"

    candidate = parse_row(discover_columns(HEADER), row)

    assert candidate.fulfilled is True


def test_parse_row_tolerates_short_rows() -> None:
    row = _row()[:3]

    candidate = parse_row(discover_columns(HEADER), row)

    assert candidate.shipment.street_1 == ""
    assert candidate.shipment.contents == ""


def test_parse_sheet_stops_at_first_blank_email_and_skips_bad_rows() -> None:
    bad = _row()
    bad[0] = "not a date"
    blank = _row()
    blank[1] = ""
    second = _row()
    second[1] = "sam@example.com"
    source = SheetValues(
        spreadsheet_id="sheet-1",
        values=[HEADER, _row(), bad, second, blank, _row()],
    )

    candidates = parse_sheet(source)

    assert [candidate.shipment.email for candidate in candidates] == [
        "alex@example.com",
        "sam@example.com",
    ]


def test_parse_sheet_requires_email_column() -> None:
    source = SheetValues(spreadsheet_id="sheet-1", values=[["Timestamp", "Name"]])

    with pytest.raises(IntakeError):
        parse_sheet(source)
