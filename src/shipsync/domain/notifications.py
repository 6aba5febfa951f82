"""Email templates sent as shipments move through their lifecycle."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.domain.errors import ExternalServiceError
from shipsync.domain.ports import EmailMessage

if TYPE_CHECKING:
    from shipsync.config import ShippingConfig
    from shipsync.domain.model import OutboundShipment
    from shipsync.domain.ports import Notifier

log = getLogger(__name__)

_SIGNATURE = """xoxo,
  The Shipping Bot"""


def order_received(shipment: OutboundShipment, config: ShippingConfig) -> EmailMessage:
    body = f"""Below is the information for your order:

**Contents:**
{shipment.contents}

**Address to:**
{shipment.name}
{shipment.format_address()}

You will receive another email once your order has been shipped with your tracking numbers.

If you have any questions or concerns, please respond to this email!
Have a splendid day!

{_SIGNATURE}"""
    return EmailMessage(
        subject=(
            f"{shipment.name}, your order from {config.office.company} has been received!"
        ),
        body=body,
        to=(shipment.email,),
        cc=(config.sender_email,),
        sender=config.sender_email,
    )


def on_the_way(shipment: OutboundShipment, config: ShippingConfig) -> EmailMessage:
    body = f"""Below is the information for your package:

**Contents:**
{shipment.contents}

**Address to:**
{shipment.name}
{shipment.format_address()}

**Tracking link:**
{shipment.branded_tracking_link}

If you have any questions or concerns, please respond to this email!
Have a splendid day!

{_SIGNATURE}"""
    return EmailMessage(
        subject=f"{shipment.name}, your package from {config.office.company} is on the way!",
        body=body,
        to=(shipment.email,),
        cc=(config.sender_email,),
        sender=config.sender_email,
    )


def ready_to_package(shipment: OutboundShipment, config: ShippingConfig) -> EmailMessage:
    body = f"""Below is the information for the package:

**Contents:**
{shipment.contents}

**Address to:**
{shipment.name}
{shipment.format_address()}

**Tracking link:**
{shipment.branded_tracking_link}

The label should already be printed on the cart with the label printers. Please
take the label and affix it to the package with the specified contents. It can
then be dropped off for {shipment.carrier}.

You DO NOT need to scan the barcodes of the items since they have already been
deducted from inventory.

{_SIGNATURE}"""
    return EmailMessage(
        subject=f"Shipment to {shipment.name} is ready to be packaged",
        body=body,
        to=(config.sender_email,),
        sender=config.sender_email,
    )


async def send_best_effort(
    notifier: Notifier, message: EmailMessage, *, timeout: float | None = None
) -> bool:
    """Send ``message``, logging instead of raising when delivery fails or stalls."""

    try:
        async with asyncio.timeout(timeout):
            await notifier.send(message)
    except (ExternalServiceError, TimeoutError):
        log.exception("Failed to send email %r to %s", message.subject, ", ".join(message.to))
        return False
    return True
