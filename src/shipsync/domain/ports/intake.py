"""Ports and value types for shipment intake."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from shipsync.domain.model import OutboundShipment


@runtime_checkable
class RowSource(Protocol):
    """A header row plus data rows, as read from an intake spreadsheet."""

    @property
    def source_id(self) -> str: ...

    def header(self) -> list[str]: ...

    def rows(self) -> list[list[str]]: ...


@dataclass(slots=True)
class IntakeCandidate:
    """A shipment parsed from intake, plus whether the form marks it as already sent."""

    shipment: OutboundShipment
    fulfilled: bool = False
