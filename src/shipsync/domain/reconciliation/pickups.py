"""Batch labelled USPS shipments into a single carrier pickup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.config.errors import ConfigurationError
from shipsync.config.sync import SyncConfig
from shipsync.domain.model import Carrier, PackagePickup
from shipsync.domain.ports import PickupRequest
from shipsync.domain.time_windows import Clock, next_pickup_window, utcnow

from .labels import office_address

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from shipsync.config import ShippingConfig
    from shipsync.domain.ports import (
        CarrierAccount,
        CarrierGateway,
        OutboundMirror,
        PickupMirror,
        ShipmentUnitOfWork,
    )

log = getLogger(__name__)


class CarrierAccountNotFoundError(ConfigurationError):
    """Raised when the carrier API has no account for the carrier we need a pickup from."""


def find_carrier_account(accounts: list[CarrierAccount], carrier: str) -> CarrierAccount | None:
    wanted = carrier.strip().lower()
    for account in accounts:
        if account.carrier.strip().lower() == wanted:
            return account
    return None


@dataclass
class PickupScheduler:
    """Schedule one pickup for every shipment that is printed but not yet collected.

    Scheduling is all-or-nothing: if the carrier rejects the request no shipment is
    stamped with a pickup date, and the next run picks the same shipments up again.
    """

    unit_of_work_factory: Callable[[], ShipmentUnitOfWork]
    gateway: CarrierGateway
    pickup_mirror: PickupMirror
    outbound_mirror: OutboundMirror
    shipping: ShippingConfig
    sync: SyncConfig = field(default_factory=SyncConfig)
    clock: Clock = utcnow
    carrier: str = Carrier.USPS

    async def create_pickup(self) -> PackagePickup | None:
        with self.unit_of_work_factory() as uow:
            awaiting = uow.repositories.outbound.find_awaiting_pickup(self.carrier)
        if not awaiting:
            log.info("No labelled %s shipments are waiting for a pickup", self.carrier)
            return None

        accounts = await self._call(self.gateway.list_carrier_accounts())
        account = find_carrier_account(accounts, self.carrier)
        if account is None:
            log.error("No %s carrier account is configured; cannot schedule pickup", self.carrier)
            raise CarrierAccountNotFoundError(f"No carrier account for {self.carrier}")

        window = next_pickup_window(timezone=self.shipping.timezone, clock=self.clock)
        request = PickupRequest(
            carrier_account_id=account.account_id,
            address=office_address(self.shipping),
            transactions=tuple(shipment.carrier_shipment_id for shipment in awaiting),
            requested_start_time=window.start,
            requested_end_time=window.end,
            instructions=self.shipping.pickup_instructions,
        )
        confirmation = await self._call(self.gateway.create_pickup(request))
        log.info(
            "Scheduled %s pickup %s for %s shipments on %s",
            self.carrier,
            confirmation.pickup_id,
            len(awaiting),
            window.day,
        )

        pickup = PackagePickup(
            carrier_pickup_id=confirmation.pickup_id,
            confirmation_code=confirmation.confirmation_code,
            carrier=self.carrier,
            status=confirmation.status,
            location=self.shipping.office.company,
            transactions=list(request.transactions),
            shipment_ids=[str(shipment.id) for shipment in awaiting],
            shipment_record_ids=[
                shipment.mirror_record_id for shipment in awaiting if shipment.mirror_record_id
            ],
            requested_start_time=window.start,
            requested_end_time=window.end,
            confirmed_start_time=confirmation.confirmed_start_time,
            confirmed_end_time=confirmation.confirmed_end_time,
            cancel_by_time=confirmation.cancel_by_time,
            pickup_date=window.day,
            messages="; ".join(confirmation.messages),
        )
        with self.unit_of_work_factory() as uow:
            pickup = uow.repositories.pickups.upsert(pickup)
            for shipment in awaiting:
                shipment.pickup_date = window.day
                uow.repositories.outbound.update(shipment)
            uow.commit()

        pickup.mirror_record_id = await self._call(self.pickup_mirror.write_pickup(pickup))
        for shipment in awaiting:
            await self._call(self.outbound_mirror.write(shipment))
        with self.unit_of_work_factory() as uow:
            uow.repositories.pickups.upsert(pickup)
            uow.commit()
        return pickup

    async def _call[T](self, awaitable: Awaitable[T]) -> T:
        async with asyncio.timeout(self.sync.call_timeout_seconds):
            return await awaitable
