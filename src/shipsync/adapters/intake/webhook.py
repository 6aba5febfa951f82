"""Translate form-submit webhook payloads into outbound shipment candidates."""

from __future__ import annotations

from dataclasses import fields

from pydantic import BaseModel, ConfigDict, Field

from shipsync.domain.ports import IntakeCandidate

from .rows import DEFAULT_COUNTRY, address_present, build_candidate, discover_columns


class WebhookModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SubmissionFlags(WebhookModel):
    sent: bool | None = None


class FormSubmissionPayload(WebhookModel):
    """Body posted by the form's submit trigger.

    ``namedValues`` maps each question title to the list of answers given; every
    question is optional.
    """

    spreadsheet_id: str | None = Field(default=None, alias="spreadsheetId")
    named_values: dict[str, list[str]] = Field(default_factory=dict, alias="namedValues")
    flags: SubmissionFlags = Field(default_factory=SubmissionFlags)


def parse_form_submission(payload: FormSubmissionPayload) -> IntakeCandidate:
    titles = list(payload.named_values)
    mapping = discover_columns(titles)
    values: dict[str, str] = {}
    for column in fields(mapping):
        index = getattr(mapping, column.name)
        if index is None:
            continue
        answers = payload.named_values[titles[index]]
        values[column.name] = answers[0] if answers else ""

    if payload.flags.sent is not None:
        values["sent"] = "true" if payload.flags.sent else ""

    notes = (
        f"Automatically generated from the Google sheet {payload.spreadsheet_id}"
        if payload.spreadsheet_id
        else ""
    )
    # the country only defaults when the payload carries an address
    default_country = DEFAULT_COUNTRY if address_present(values) else ""
    return build_candidate(values, notes=notes, default_country=default_country)

