"""Public interface for the intake adapters."""

from __future__ import annotations

from .rows import ColumnMapping, discover_columns, parse_row, parse_sheet, parse_timestamp
from .webhook import FormSubmissionPayload, SubmissionFlags, parse_form_submission

__all__ = [
    "ColumnMapping",
    "FormSubmissionPayload",
    "SubmissionFlags",
    "discover_columns",
    "parse_form_submission",
    "parse_row",
    "parse_sheet",
    "parse_timestamp",
]
