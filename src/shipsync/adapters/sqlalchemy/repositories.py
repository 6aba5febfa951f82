"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from shipsync.adapters.sqlalchemy.mappings import (
    inbound_shipment_table,
    outbound_shipment_table,
    package_pickup_table,
)
from shipsync.domain.model import (
    TERMINAL_STATUSES,
    InboundShipment,
    OutboundShipment,
    PackagePickup,
    Shipment,
    ShipmentStatus,
)

if TYPE_CHECKING:
    from collections.abc import Hashable

    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyShipmentRepository[TShipment: Shipment](ABC):
    """Shared upsert and lookup logic for one shipment table."""

    def __init__(self, session: Session, shipment_cls: type[TShipment], table: Table) -> None:
        self.session = session
        self._shipment_cls = shipment_cls
        self._table = table

    @abstractmethod
    def _key_clause(self, key: Hashable) -> ColumnElement[bool]:
        """Where clause matching the row that holds natural key ``key``."""

    def find_by_key(self, key: Hashable) -> TShipment | None:
        stmt = select(self._shipment_cls).where(self._key_clause(key)).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()

    def upsert(self, shipment: TShipment) -> TShipment:
        """Insert ``shipment`` or overwrite the row holding the same natural key."""

        existing = self.find_by_key(shipment.natural_key)
        if existing is not None and existing.id != shipment.id:
            log.debug(
                "Reusing id %s for %s key %s", existing.id, self._table.name, shipment.natural_key
            )
            shipment.id = existing.id
        merged = self.session.merge(shipment)
        self.session.flush()
        return merged

    def update(self, shipment: TShipment) -> None:
        self.session.merge(shipment)

    def list_active(self) -> list[TShipment]:
        stmt = (
            select(self._shipment_cls)
            .where(self._table.c.status.not_in(sorted(TERMINAL_STATUSES)))
            .order_by(self._table.c.created_time)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyOutboundShipmentRepository(SqlAlchemyShipmentRepository[OutboundShipment]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, OutboundShipment, outbound_shipment_table)

    def _key_clause(self, key: Hashable) -> ColumnElement[bool]:
        email, created_time = _pair(key)
        columns = self._table.c
        return (func.lower(columns.email) == str(email).strip().lower()) & (
            columns.created_time == created_time
        )

    def find_awaiting_pickup(self, carrier: str) -> list[OutboundShipment]:
        columns = self._table.c
        stmt = (
            select(OutboundShipment)
            .where(columns.status == ShipmentStatus.LABEL_PRINTED.value)
            .where(func.lower(columns.carrier) == carrier.strip().lower())
            .where(columns.pickup_date.is_(None))
            .where(columns.carrier_shipment_id != "")
            .order_by(columns.created_time)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyInboundShipmentRepository(SqlAlchemyShipmentRepository[InboundShipment]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, InboundShipment, inbound_shipment_table)

    def _key_clause(self, key: Hashable) -> ColumnElement[bool]:
        carrier, tracking_number = _pair(key)
        columns = self._table.c
        return (func.lower(columns.carrier) == str(carrier).strip().lower()) & (
            columns.tracking_number == str(tracking_number).strip()
        )


class SqlAlchemyPackagePickupRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_carrier_id(self, carrier_pickup_id: str) -> PackagePickup | None:
        stmt = select(PackagePickup).where(
            package_pickup_table.c.carrier_pickup_id == carrier_pickup_id
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def upsert(self, pickup: PackagePickup) -> PackagePickup:
        existing = self.find_by_carrier_id(pickup.carrier_pickup_id)
        if existing is not None and existing.id != pickup.id:
            pickup.id = existing.id
        merged = self.session.merge(pickup)
        self.session.flush()
        return merged


def _pair(key: Hashable) -> tuple[Any, Any]:
    if not isinstance(key, tuple) or len(key) != 2:
        raise TypeError(f"Unexpected shipment key {key!r}")
    return key[0], key[1]


if TYPE_CHECKING:
    from shipsync.domain.ports import (
        InboundShipmentRepository,
        OutboundShipmentRepository,
        PackagePickupRepository,
    )

    _session: Session
    _outbound_check: OutboundShipmentRepository = SqlAlchemyOutboundShipmentRepository(_session)
    _inbound_check: InboundShipmentRepository = SqlAlchemyInboundShipmentRepository(_session)
    _pickup_check: PackagePickupRepository = SqlAlchemyPackagePickupRepository(_session)
