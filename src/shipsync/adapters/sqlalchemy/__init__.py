"""SQLAlchemy adapter package for shipsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyInboundShipmentRepository,
    SqlAlchemyOutboundShipmentRepository,
    SqlAlchemyPackagePickupRepository,
)
from .unit_of_work import SqlAlchemyShipmentUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyInboundShipmentRepository",
    "SqlAlchemyOutboundShipmentRepository",
    "SqlAlchemyPackagePickupRepository",
    "SqlAlchemyShipmentUnitOfWork",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
