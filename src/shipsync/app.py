"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.adapters.airtable import build_airtable_mirrors
from shipsync.adapters.geocode import GoogleGeocoder
from shipsync.adapters.intake import parse_form_submission, parse_sheet
from shipsync.adapters.printer import HttpLabelPrinter
from shipsync.adapters.sendgrid import SendGridNotifier
from shipsync.adapters.sheets import GoogleSheetsReader
from shipsync.adapters.shippo import ShippoGateway
from shipsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyShipmentUnitOfWork,
    is_started,
    startup,
)
from shipsync.config import get_shipping_config, get_sync_config
from shipsync.domain.errors import ShipmentError
from shipsync.domain.reconciliation import (
    PickupScheduler,
    ReconcileResult,
    ReconciliationEngine,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from shipsync.adapters.intake import FormSubmissionPayload
    from shipsync.domain.model import OutboundShipment, PackagePickup
    from shipsync.domain.ports import IntakeCandidate, ShipmentUnitOfWork

UnitOfWorkFactory = Callable[[], "ShipmentUnitOfWork"]

log = getLogger(__name__)


@dataclass(slots=True)
class OutboundSyncResult:
    ingested: int = 0
    skipped: int = 0
    intake_failures: list[str] = field(default_factory=list)
    reconcile: ReconcileResult = field(default_factory=ReconcileResult)


@dataclass(slots=True)
class Services:
    engine: ReconciliationEngine
    scheduler: PickupScheduler
    sheets: GoogleSheetsReader | None = None


@asynccontextmanager
async def open_services(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    with_sheets: bool = False,
) -> AsyncIterator[Services]:
    """Build every adapter from the environment and close their clients on exit."""

    if unit_of_work_factory is None and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyShipmentUnitOfWork
    shipping = get_shipping_config()
    sync = get_sync_config()

    async with AsyncExitStack() as stack:
        gateway = await stack.enter_async_context(ShippoGateway.from_config())
        mirrors = build_airtable_mirrors()
        await stack.enter_async_context(mirrors.base)
        notifier = await stack.enter_async_context(SendGridNotifier.from_config())
        printer = await stack.enter_async_context(HttpLabelPrinter.from_config())
        geocoder = await stack.enter_async_context(GoogleGeocoder.from_config())
        sheets = (
            await stack.enter_async_context(GoogleSheetsReader.from_config())
            if with_sheets
            else None
        )

        engine = ReconciliationEngine(
            unit_of_work_factory=effective_uow,
            gateway=gateway,
            outbound_mirror=mirrors.outbound,
            inbound_mirror=mirrors.inbound,
            notifier=notifier,
            printer=printer,
            geocoder=geocoder,
            shipping=shipping,
            sync=sync,
        )
        scheduler = PickupScheduler(
            unit_of_work_factory=effective_uow,
            gateway=gateway,
            pickup_mirror=mirrors.pickups,
            outbound_mirror=mirrors.outbound,
            shipping=shipping,
            sync=sync,
        )
        yield Services(engine=engine, scheduler=scheduler, sheets=sheets)


async def ingest_candidates(
    engine: ReconciliationEngine,
    candidates: list[IntakeCandidate],
    result: OutboundSyncResult,
) -> None:
    for candidate in candidates:
        if candidate.fulfilled:
            result.skipped += 1
            continue
        try:
            await engine.ingest(candidate)
        except (ShipmentError, TimeoutError) as exc:
            log.warning("Could not ingest intake entry for %s: %s", candidate.shipment.email, exc)
            result.intake_failures.append(candidate.shipment.email)
        else:
            result.ingested += 1


async def run_outbound_sync(services: Services) -> OutboundSyncResult:
    result = OutboundSyncResult()
    if services.sheets is not None:
        for values in await services.sheets.read_all():
            await ingest_candidates(services.engine, parse_sheet(values), result)
    result.reconcile = await services.engine.reconcile_outbound()
    return result


async def run_inbound_sync(services: Services) -> ReconcileResult:
    await services.engine.discover_inbound()
    return await services.engine.reconcile_inbound()


def sync_outbound(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> OutboundSyncResult:
    """Pull new form responses, then drive every open outbound shipment forward."""

    async def run() -> OutboundSyncResult:
        async with open_services(
            unit_of_work_factory=unit_of_work_factory, with_sheets=True
        ) as services:
            return await run_outbound_sync(services)

    log.info("Starting outbound shipment sync")
    result = asyncio.run(run())
    log.info(
        "Finished outbound sync: ingested=%s, skipped=%s, intake_failures=%s, "
        "reconciled=%s, failed=%s",
        result.ingested,
        result.skipped,
        len(result.intake_failures),
        result.reconcile.processed,
        len(result.reconcile.failed),
    )
    return result


def sync_inbound(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> ReconcileResult:
    """Discover inbound shipments in the mirror and poll their tracking."""

    async def run() -> ReconcileResult:
        async with open_services(unit_of_work_factory=unit_of_work_factory) as services:
            return await run_inbound_sync(services)

    log.info("Starting inbound shipment sync")
    result = asyncio.run(run())
    log.info(
        "Finished inbound sync: processed=%s, failed=%s", result.processed, len(result.failed)
    )
    return result


def schedule_pickup(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> PackagePickup | None:
    """Book one carrier pickup for every printed label that is waiting."""

    async def run() -> PackagePickup | None:
        async with open_services(unit_of_work_factory=unit_of_work_factory) as services:
            return await services.scheduler.create_pickup()

    return asyncio.run(run())


def ingest_webhook(
    payload: FormSubmissionPayload,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OutboundShipment | None:
    """Ingest one form submission and run its first reconciliation pass."""

    candidate = parse_form_submission(payload)
    if candidate.fulfilled:
        log.info("Form submission for %s is marked as sent; skipping", candidate.shipment.email)
        return None

    async def run() -> OutboundShipment:
        async with open_services(unit_of_work_factory=unit_of_work_factory) as services:
            shipment = await services.engine.ingest(candidate)
            await services.engine.reconcile_outbound([shipment])
            return shipment

    return asyncio.run(run())
