"""Reconciliation engine driving shipments through label creation and tracking.

Outbound lifecycle::

    Queued -> Label created -> Label printed -> Shipped -> Delivered
                                                   \\-> Returned | Failure
    (any non-terminal state) -> Picked up           when handed over in person

Each pass over one record runs its steps strictly in order and persists after
every step that talks to the carrier, so a pass that dies half way resumes from
the last checkpoint. Records are processed concurrently, bounded by
``SyncConfig.max_concurrency``; a per natural key lock keeps two passes off the
same record.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from shipsync.config.sync import SyncConfig
from shipsync.domain.errors import ExternalServiceError, ShipmentDataError, ShipmentError
from shipsync.domain.model import (
    Direction,
    InboundShipment,
    OutboundShipment,
    Shipment,
    ShipmentStatus,
    tracking_carrier_code,
)
from shipsync.domain.notifications import (
    on_the_way,
    order_received,
    ready_to_package,
    send_best_effort,
)

from .labels import apply_label, build_shipment_request, select_rate
from .merge import copy_shipment, merge, overlay_authority
from .tracking import apply_tracking

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from uuid import UUID

    from shipsync.config import ShippingConfig
    from shipsync.domain.ports import (
        CarrierGateway,
        EmailMessage,
        Geocoder,
        InboundMirror,
        IntakeCandidate,
        LabelPrinter,
        Notifier,
        OutboundMirror,
        ShipmentMirror,
        ShipmentRepository,
        ShipmentUnitOfWork,
    )

log = getLogger(__name__)

UnitOfWorkFactory = Callable[[], "ShipmentUnitOfWork"]


@dataclass(slots=True)
class ReconcileResult:
    """Per-record outcome of a batch pass."""

    succeeded: list[UUID] = field(default_factory=list)
    failed: dict[UUID, str] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed)


@dataclass(slots=True)
class _KeyedLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLocks:
    """One :class:`asyncio.Lock` per key, dropped again once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, _KeyedLock] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        entry = self._locks.setdefault(key, _KeyedLock())
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


@dataclass
class ReconciliationEngine:
    unit_of_work_factory: UnitOfWorkFactory
    gateway: CarrierGateway
    outbound_mirror: OutboundMirror
    inbound_mirror: InboundMirror
    notifier: Notifier
    printer: LabelPrinter
    geocoder: Geocoder
    shipping: ShippingConfig
    sync: SyncConfig = field(default_factory=SyncConfig)
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    # Intake --------------------------------------------------------------------

    async def ingest(self, candidate: IntakeCandidate) -> OutboundShipment:
        """Merge an intake candidate with what the repository and mirror know, then store it."""

        incoming = candidate.shipment
        key = incoming.natural_key
        if not key[0] or key[1] is None:
            raise ShipmentDataError("Intake candidate needs an email and a creation time")

        async with self.locks.hold((Direction.OUTBOUND, key)):
            with self.unit_of_work_factory() as uow:
                existing = uow.repositories.outbound.find_by_key(key)
            mirror_record = await self._call(
                self.outbound_mirror.get(
                    key, record_id=existing.mirror_record_id if existing else ""
                )
            )
            base = overlay_authority(existing, mirror_record) if existing else mirror_record
            shipment = merge(incoming, base, tracking_host=self.shipping.tracking_host)
            shipment.refresh_address()
            await self._persist(shipment)

        if base is None:
            log.info("Created outbound shipment %s for %s", shipment.id, shipment.email)
            if not candidate.fulfilled:
                await self._notify(order_received(shipment, self.shipping))
        return shipment

    async def discover_inbound(self) -> list[InboundShipment]:
        """Pull inbound shipments people typed into the mirror into the repository."""

        discovered: list[InboundShipment] = []
        for candidate in await self._call(self.inbound_mirror.records()):
            if not candidate.carrier.strip() or not candidate.tracking_number.strip():
                log.debug(
                    "Skipping inbound mirror record %s without tracking",
                    candidate.mirror_record_id,
                )
                continue
            async with self.locks.hold((Direction.INBOUND, candidate.natural_key)):
                with self.unit_of_work_factory() as uow:
                    existing = uow.repositories.inbound.find_by_key(candidate.natural_key)
                base = overlay_authority(existing, candidate) if existing else None
                shipment = merge(candidate, base, tracking_host=self.shipping.tracking_host)
                with self.unit_of_work_factory() as uow:
                    stored = uow.repositories.inbound.upsert(shipment)
                    uow.commit()
            discovered.append(stored)
        log.info("Discovered %s inbound shipments in the mirror", len(discovered))
        return discovered

    # Batch passes --------------------------------------------------------------

    async def reconcile_outbound(
        self, records: Sequence[OutboundShipment] | None = None
    ) -> ReconcileResult:
        if records is None:
            with self.unit_of_work_factory() as uow:
                records = uow.repositories.outbound.list_active()
        log.info("Reconciling %s outbound shipments", len(records))
        return await self._run_batch(records, self.process_outbound)

    async def reconcile_inbound(
        self, records: Sequence[InboundShipment] | None = None
    ) -> ReconcileResult:
        if records is None:
            with self.unit_of_work_factory() as uow:
                records = uow.repositories.inbound.list_active()
        log.info("Reconciling %s inbound shipments", len(records))
        return await self._run_batch(records, self.process_inbound)

    async def _run_batch[TShipment: Shipment](
        self,
        records: Sequence[TShipment],
        process: Callable[[TShipment], Awaitable[None]],
    ) -> ReconcileResult:
        result = ReconcileResult()
        semaphore = asyncio.Semaphore(self.sync.max_concurrency)

        async def run_one(record: TShipment) -> None:
            async with semaphore:
                try:
                    await process(record)
                except ShipmentDataError as exc:
                    log.warning("Shipment %s needs attention: %s", record.id, exc)
                    result.failed[record.id] = str(exc)
                except (ShipmentError, TimeoutError) as exc:
                    log.exception("Reconciling shipment %s failed", record.id)
                    result.failed[record.id] = str(exc) or type(exc).__name__
                else:
                    result.succeeded.append(record.id)

        try:
            async with asyncio.TaskGroup() as group:
                for record in records:
                    group.create_task(run_one(record))
        except ExceptionGroup as errors:
            # configuration faults and bugs stop the whole pass
            raise errors.exceptions[0] from None

        log.info(
            "Reconciliation pass finished: processed=%s, failed=%s",
            result.processed,
            len(result.failed),
        )
        return result

    # Single record passes ------------------------------------------------------

    async def process_outbound(self, record: OutboundShipment) -> None:
        async with self.locks.hold((Direction.OUTBOUND, record.natural_key)):
            await self._process_outbound(self._reload(record))

    async def _process_outbound(self, shipment: OutboundShipment) -> None:
        mirror_record = await self._call(
            self.outbound_mirror.get(shipment.natural_key, record_id=shipment.mirror_record_id)
        )
        shipment = overlay_authority(shipment, mirror_record)
        shipment.refresh_address()

        if shipment.needs_geocode and shipment.address_formatted:
            await self._geocode(shipment)

        if shipment.local_pickup:
            if shipment.status != ShipmentStatus.PICKED_UP:
                log.info("Shipment %s was picked up in person", shipment.id)
                shipment.status = ShipmentStatus.PICKED_UP
                await self._persist(shipment)
            return
        if shipment.is_terminal:
            return

        if shipment.carrier_shipment_id:
            await self._track_outbound(shipment)
            return
        await self._create_label(shipment)

    async def _geocode(self, shipment: Shipment) -> None:
        try:
            coordinates = await self._call(self.geocoder.geocode(shipment.geocode_query()))
        except (ExternalServiceError, ShipmentDataError, TimeoutError) as exc:
            log.warning("Could not geocode shipment %s: %s", shipment.id, exc)
            return
        shipment.latitude = coordinates.latitude
        shipment.longitude = coordinates.longitude
        await self._persist(shipment)

    async def _track_outbound(self, shipment: OutboundShipment) -> None:
        if shipment.status == ShipmentStatus.LABEL_CREATED:
            # bought on an earlier pass that never reached the printer
            await self._print_label(shipment)

        if not shipment.tracking_number:
            log.warning("Shipment %s has a label but no tracking number yet", shipment.id)
            return

        tracking = await self._call(
            self.gateway.get_tracking_status(
                tracking_carrier_code(shipment.carrier), shipment.tracking_number
            )
        )
        update = apply_tracking(shipment, tracking, host=self.shipping.tracking_host)
        await self._persist(shipment)
        if update.newly_shipped:
            await self._notify(on_the_way(shipment, self.shipping))

    async def _create_label(self, shipment: OutboundShipment) -> None:
        request = build_shipment_request(shipment, self.shipping)
        rates = await self._call(self.gateway.quote(request))
        rate = select_rate(rates, self.shipping.rate_preferences)
        if rate is None:
            offered = sorted({tag for r in rates for tag in r.attributes})
            raise ShipmentDataError(
                f"No rate tagged {'/'.join(self.shipping.rate_preferences)} "
                f"among {len(rates)} rates (tags offered: {', '.join(offered) or 'none'})"
            )

        label = await self._call(self.gateway.purchase_label(rate))
        apply_label(shipment, rate, label, host=self.shipping.tracking_host)
        await self._persist(shipment)
        if not label.succeeded:
            return
        log.info(
            "Bought %s label for shipment %s: %s (%.2f)",
            shipment.carrier,
            shipment.id,
            shipment.tracking_number,
            shipment.cost,
        )

        await self._register_webhook(shipment)
        await self._print_label(shipment)

    async def _register_webhook(self, shipment: Shipment) -> None:
        try:
            await self._call(
                self.gateway.register_tracking_webhook(
                    tracking_carrier_code(shipment.carrier), shipment.tracking_number
                )
            )
        except (ExternalServiceError, TimeoutError) as exc:
            log.warning("Registering the tracking webhook for %s failed: %s", shipment.id, exc)

    async def _print_label(self, shipment: OutboundShipment) -> None:
        await self._call(self.printer.print_label(shipment.label_link))
        shipment.status = ShipmentStatus.LABEL_PRINTED
        await self._persist(shipment)
        await self._notify(ready_to_package(shipment, self.shipping))

    async def process_inbound(self, record: InboundShipment) -> None:
        async with self.locks.hold((Direction.INBOUND, record.natural_key)):
            shipment = self._reload(record)
            if shipment.status == ShipmentStatus.DELIVERED:
                return
            if not shipment.carrier or not shipment.tracking_number:
                raise ShipmentDataError(f"Inbound shipment {shipment.id} has no tracking number")

            tracking = await self._call(
                self.gateway.get_tracking_status(
                    tracking_carrier_code(shipment.carrier), shipment.tracking_number
                )
            )
            apply_tracking(shipment, tracking, host=self.shipping.tracking_host)
            await self._persist(shipment)

    # Helpers -------------------------------------------------------------------

    def _reload[TShipment: Shipment](self, record: TShipment) -> TShipment:
        """Detached copy of the stored version of ``record``, falling back to ``record`` itself."""

        with self.unit_of_work_factory() as uow:
            current = self._repository(uow, record).find_by_key(record.natural_key)
        return copy_shipment(current if current is not None else record)

    async def _call[T](self, awaitable: Awaitable[T]) -> T:
        async with asyncio.timeout(self.sync.call_timeout_seconds):
            return await awaitable

    async def _notify(self, message: EmailMessage) -> None:
        await send_best_effort(self.notifier, message, timeout=self.sync.call_timeout_seconds)

    async def _persist(self, shipment: Shipment) -> None:
        """Checkpoint ``shipment`` to the repository, then mirror it."""

        with self.unit_of_work_factory() as uow:
            self._repository(uow, shipment).upsert(shipment)
            uow.commit()

        record_id = await self._call(self._mirror(shipment).write(shipment))
        if record_id and record_id != shipment.mirror_record_id:
            shipment.mirror_record_id = record_id
            with self.unit_of_work_factory() as uow:
                self._repository(uow, shipment).update(shipment)
                uow.commit()

    @staticmethod
    def _repository(uow: ShipmentUnitOfWork, shipment: Shipment) -> ShipmentRepository[Any]:
        if shipment.direction is Direction.OUTBOUND:
            return uow.repositories.outbound
        return uow.repositories.inbound

    def _mirror(self, shipment: Shipment) -> ShipmentMirror[Any]:
        if shipment.direction is Direction.OUTBOUND:
            return cast("ShipmentMirror[Any]", self.outbound_mirror)
        return cast("ShipmentMirror[Any]", self.inbound_mirror)
