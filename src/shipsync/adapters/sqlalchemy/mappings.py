"""SQLAlchemy mapping metadata for the shipment domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Float,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from shipsync.domain.model import InboundShipment, OutboundShipment, PackagePickup, ShipmentStatus

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StringListType(TypeDecorator[list[str]]):
    """A list of strings stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str)]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _shipment_columns() -> list[Column[Any]]:
    return [
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column("mirror_record_id", String, nullable=False, default=""),
        Column("name", String, nullable=False, default=""),
        Column("email", String, nullable=False, default=""),
        Column("phone", String, nullable=False, default=""),
        Column("contents", Text, nullable=False, default=""),
        Column("street_1", String, nullable=False, default=""),
        Column("street_2", String, nullable=False, default=""),
        Column("city", String, nullable=False, default=""),
        Column("state", String, nullable=False, default=""),
        Column("zipcode", String, nullable=False, default=""),
        Column("country", String, nullable=False, default=""),
        Column("address_formatted", Text, nullable=False, default=""),
        Column("latitude", Float, nullable=False, default=0.0),
        Column("longitude", Float, nullable=False, default=0.0),
        Column("geocode_cache", Text, nullable=False, default=""),
        Column("carrier", String, nullable=False, default=""),
        Column("tracking_number", String, nullable=False, default=""),
        Column("tracking_link", String, nullable=False, default=""),
        Column("branded_tracking_link", String, nullable=False, default=""),
        Column("tracking_status", Text, nullable=False, default=""),
        Column("eta", UTCDateTime(), nullable=True),
        Column("shipped_time", UTCDateTime(), nullable=True),
        Column("delivered_time", UTCDateTime(), nullable=True),
        Column("label_link", String, nullable=False, default=""),
        Column("cost", Float, nullable=False, default=0.0),
        Column("carrier_shipment_id", String, nullable=False, default=""),
        Column("status", String, nullable=False, default=ShipmentStatus.QUEUED.value),
        Column("local_pickup", Boolean, nullable=False, default=False),
        Column("notes", Text, nullable=False, default=""),
        Column("messages", Text, nullable=False, default=""),
        Column("pickup_date", Date, nullable=True),
        Column("pickup_links", StringListType(), nullable=False),
        Column("created_time", UTCDateTime(), nullable=True),
    ]


# Core tables -----------------------------------------------------------------

outbound_shipment_table = Table(
    "outbound_shipment",
    mapper_registry.metadata,
    *_shipment_columns(),
    UniqueConstraint("email", "created_time"),
    Index("ix_outbound_shipment_status", "status"),
)

inbound_shipment_table = Table(
    "inbound_shipment",
    mapper_registry.metadata,
    *_shipment_columns(),
    UniqueConstraint("carrier", "tracking_number"),
    Index("ix_inbound_shipment_status", "status"),
)

package_pickup_table = Table(
    "package_pickup",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("carrier_pickup_id", String, nullable=False, unique=True),
    Column("mirror_record_id", String, nullable=False, default=""),
    Column("confirmation_code", String, nullable=False, default=""),
    Column("carrier", String, nullable=False, default=""),
    Column("status", String, nullable=False, default=""),
    Column("location", String, nullable=False, default=""),
    Column("transactions", StringListType(), nullable=False),
    Column("shipment_ids", StringListType(), nullable=False),
    Column("shipment_record_ids", StringListType(), nullable=False),
    Column("requested_start_time", UTCDateTime(), nullable=True),
    Column("requested_end_time", UTCDateTime(), nullable=True),
    Column("confirmed_start_time", UTCDateTime(), nullable=True),
    Column("confirmed_end_time", UTCDateTime(), nullable=True),
    Column("cancel_by_time", UTCDateTime(), nullable=True),
    Column("pickup_date", Date, nullable=True),
    Column("messages", Text, nullable=False, default=""),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(OutboundShipment, outbound_shipment_table)
    mapper_registry.map_imperatively(InboundShipment, inbound_shipment_table)
    mapper_registry.map_imperatively(PackagePickup, package_pickup_table)

    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create every table that does not exist yet."""

    mapper_registry.metadata.create_all(engine)
