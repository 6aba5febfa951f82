"""HTTP client for the Airtable shipments base."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import quote

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.airtable import AirtableConfig, get_airtable_config
from shipsync.domain.errors import ExternalServiceError
from shipsync.domain.model import InboundShipment, OutboundShipment, Shipment

from .schema import RecordRef, ShipmentRecord, ShipmentRecordsPage
from .translator import key_formula, parse_shipment, pickup_fields, shipment_fields

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.model import PackagePickup
    from shipsync.domain.ports import InboundMirror, OutboundMirror, PickupMirror

log = getLogger(__name__)

_PAGE_SIZE = 100
_NOT_FOUND = 404


class MirrorAPIError(ExternalServiceError):
    """Raised when the Airtable API fails or answers with an unusable payload."""

    service = "airtable"


@dataclass(kw_only=True)
class AirtableBase(ServiceClient):
    """Record level access to one Airtable base.

    The table mirrors share one instance so Airtable's per-base rate limit covers
    all of their calls.
    """

    error_type: ClassVar[type[ExternalServiceError]] = MirrorAPIError

    config: AirtableConfig

    @classmethod
    def from_config(
        cls,
        config: AirtableConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> AirtableBase:
        resolved = config or get_airtable_config()
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def _table_url(self, table: str) -> str:
        return f"{self.config.base_id}/{quote(table, safe='')}"

    async def get_record(self, table: str, record_id: str) -> ShipmentRecord | None:
        try:
            response = await self._request(
                "GET", f"{self._table_url(table)}/{record_id}", headers=self._headers
            )
        except MirrorAPIError as exc:
            if exc.status_code == _NOT_FOUND:
                log.info("Airtable record %s in %s no longer exists", record_id, table)
                return None
            raise
        return self._validate(ShipmentRecord, response)

    async def find_record(self, table: str, formula: str) -> ShipmentRecord | None:
        response = await self._request(
            "GET",
            self._table_url(table),
            params={"filterByFormula": formula, "maxRecords": 1},
            headers=self._headers,
        )
        page = self._validate(ShipmentRecordsPage, response)
        return page.records[0] if page.records else None

    async def list_records(self, table: str) -> list[ShipmentRecord]:
        records: list[ShipmentRecord] = []
        params: dict[str, str | int] = {"pageSize": _PAGE_SIZE}
        while True:
            response = await self._request(
                "GET", self._table_url(table), params=params, headers=self._headers
            )
            page = self._validate(ShipmentRecordsPage, response)
            records.extend(page.records)
            if not page.offset:
                break
            params = {"pageSize": _PAGE_SIZE, "offset": page.offset}
        log.debug("Fetched %s records from Airtable table %s", len(records), table)
        return records

    async def save(self, table: str, record_id: str, fields: dict[str, object]) -> str:
        """Update ``record_id`` in place, or create a new record when it is empty."""

        body = {"fields": fields, "typecast": True}
        if record_id:
            response = await self._request(
                "PATCH", f"{self._table_url(table)}/{record_id}", json=body, headers=self._headers
            )
        else:
            response = await self._request(
                "POST", self._table_url(table), json=body, headers=self._headers
            )
        return self._validate(RecordRef, response).id


@dataclass
class AirtableShipmentMirror[TShipment: Shipment]:
    """One shipment table of the base, as a :class:`ShipmentMirror`."""

    base: AirtableBase
    table: str
    shipment_type: type[TShipment]

    async def get(self, key: Hashable, *, record_id: str = "") -> TShipment | None:
        record: ShipmentRecord | None = None
        if record_id:
            record = await self.base.get_record(self.table, record_id)
        if record is None:
            formula = key_formula(self.shipment_type.direction, key)
            if formula is None:
                return None
            record = await self.base.find_record(self.table, formula)
        if record is None:
            return None
        return parse_shipment(record, self.shipment_type)

    async def write(self, shipment: TShipment) -> str:
        record_id = await self.base.save(
            self.table, shipment.mirror_record_id, shipment_fields(shipment)
        )
        if not shipment.mirror_record_id:
            log.info("Mirrored %s shipment %s as %s", shipment.direction, shipment.id, record_id)
        return record_id

    async def records(self) -> list[TShipment]:
        return [
            parse_shipment(record, self.shipment_type)
            for record in await self.base.list_records(self.table)
        ]


@dataclass
class AirtablePickupMirror:
    base: AirtableBase
    table: str

    async def write_pickup(self, pickup: PackagePickup) -> str:
        return await self.base.save(self.table, pickup.mirror_record_id, pickup_fields(pickup))


@dataclass(frozen=True)
class AirtableMirrors:
    base: AirtableBase
    outbound: AirtableShipmentMirror[OutboundShipment]
    inbound: AirtableShipmentMirror[InboundShipment]
    pickups: AirtablePickupMirror


def build_airtable_mirrors(
    config: AirtableConfig | None = None,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> AirtableMirrors:
    base = AirtableBase.from_config(config, client_factory=client_factory)
    tables = base.config.tables
    return AirtableMirrors(
        base=base,
        outbound=AirtableShipmentMirror(base, tables.outbound, OutboundShipment),
        inbound=AirtableShipmentMirror(base, tables.inbound, InboundShipment),
        pickups=AirtablePickupMirror(base, tables.pickups),
    )


if TYPE_CHECKING:
    _mirrors = build_airtable_mirrors()
    _outbound_check: OutboundMirror = _mirrors.outbound
    _inbound_check: InboundMirror = _mirrors.inbound
    _pickup_check: PickupMirror = _mirrors.pickups
