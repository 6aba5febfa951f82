"""Port for the human-edited copy of the shipment tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shipsync.domain.model import InboundShipment, OutboundShipment, PackagePickup, Shipment

if TYPE_CHECKING:
    from collections.abc import Hashable


@runtime_checkable
class ShipmentMirror[TShipment: Shipment](Protocol):
    """Co-authoritative table that people edit by hand.

    ``write`` only sends computed fields and returns the mirror's record id; fields
    owned by the mirror (pickup links, geocode cache, local pickup flag) are never
    written back.
    """

    async def get(self, key: Hashable, *, record_id: str = "") -> TShipment | None: ...

    async def write(self, shipment: TShipment) -> str: ...

    async def records(self) -> list[TShipment]: ...


@runtime_checkable
class OutboundMirror(ShipmentMirror[OutboundShipment], Protocol):
    """Mirror contract for outbound shipments."""


@runtime_checkable
class InboundMirror(ShipmentMirror[InboundShipment], Protocol):
    """Mirror contract for inbound shipments."""


@runtime_checkable
class PickupMirror(Protocol):
    async def write_pickup(self, pickup: PackagePickup) -> str: ...
