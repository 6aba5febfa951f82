"""Ports for persisting shipments and pickups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shipsync.domain.model import InboundShipment, OutboundShipment, PackagePickup, Shipment

if TYPE_CHECKING:
    from collections.abc import Hashable


@runtime_checkable
class ShipmentRepository[TShipment: Shipment](Protocol):
    """Store of record for one shipment direction.

    ``upsert`` matches on the natural key, so two intake events for the same key
    update one row instead of creating a second one.
    """

    def find_by_key(self, key: Hashable) -> TShipment | None: ...

    def upsert(self, shipment: TShipment) -> TShipment: ...

    def update(self, shipment: TShipment) -> None: ...

    def list_active(self) -> list[TShipment]: ...


@runtime_checkable
class OutboundShipmentRepository(ShipmentRepository[OutboundShipment], Protocol):
    def find_awaiting_pickup(self, carrier: str) -> list[OutboundShipment]: ...


@runtime_checkable
class InboundShipmentRepository(ShipmentRepository[InboundShipment], Protocol):
    """Repository contract for inbound shipments."""


@runtime_checkable
class PackagePickupRepository(Protocol):
    def upsert(self, pickup: PackagePickup) -> PackagePickup: ...
