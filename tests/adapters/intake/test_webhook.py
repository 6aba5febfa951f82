from __future__ import annotations

from datetime import UTC, datetime

import pytest

from shipsync.adapters.intake import FormSubmissionPayload, parse_form_submission
from shipsync.domain.errors import IntakeError


def _payload(**named_values: list[str]) -> dict[str, object]:
    values: dict[str, list[str]] = {
        "Timestamp": ["6/2/2025 9:30:00"],
        "Email Address": ["alex@example.com"],
        "Full Name": ["Alex Kim"],
        "Street Address Line 1": ["500 Folsom St"],
        "City": ["San Francisco"],
        "State": ["CA"],
        "Zipcode": ["94105"],
        "Hoodie Size": ["L"],
    }
    values.update(named_values)
    return {"spreadsheetId": "sheet-1", "namedValues": values}


def test_payload_uses_wire_names() -> None:
    payload = FormSubmissionPayload.model_validate(_payload())

    assert payload.spreadsheet_id == "sheet-1"
    assert payload.named_values["Full Name"] == ["Alex Kim"]
    assert payload.flags.sent is None


def test_parse_form_submission_builds_candidate() -> None:
    candidate = parse_form_submission(FormSubmissionPayload.model_validate(_payload()))
    shipment = candidate.shipment

    assert candidate.fulfilled is False
    assert shipment.email == "alex@example.com"
    assert shipment.city == "SAN FRANCISCO"
    assert shipment.country == "US"
    assert shipment.contents == "1 x Hoodie, Size: L"
    assert shipment.created_time == datetime(2025, 6, 2, 17, 30, tzinfo=UTC)
    assert shipment.notes == "Automatically generated from the Google sheet sheet-1"


def test_country_only_defaults_with_an_address() -> None:
    raw = _payload()
    named = raw["namedValues"]
    assert isinstance(named, dict)
    for title in ("Street Address Line 1", "City", "State", "Zipcode"):
        named.pop(title)

    candidate = parse_form_submission(FormSubmissionPayload.model_validate(raw))

    assert candidate.shipment.country == ""
    assert candidate.shipment.street_1 == ""


def test_sent_flag_overrides_answers() -> None:
    raw = _payload(**{"Sent": ["TRUE"]})
    raw["flags"] = {"sent": False}

    candidate = parse_form_submission(FormSubmissionPayload.model_validate(raw))

    assert candidate.fulfilled is False

    raw["flags"] = {"sent": True}
    candidate = parse_form_submission(FormSubmissionPayload.model_validate(raw))

    assert candidate.fulfilled is True


def test_empty_answers_are_treated_as_blank() -> None:
    candidate = parse_form_submission(
        FormSubmissionPayload.model_validate(_payload(**{"Phone Number": []}))
    )

    assert candidate.shipment.phone == ""


def test_submission_without_email_is_rejected() -> None:
    with pytest.raises(IntakeError):
        parse_form_submission(
            FormSubmissionPayload.model_validate(_payload(**{"Email Address": [""]}))
        )
