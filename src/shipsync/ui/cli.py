from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import ValidationError

from shipsync.adapters.intake import FormSubmissionPayload
from shipsync.app import ingest_webhook, schedule_pickup, sync_inbound, sync_outbound
from shipsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile and track shipments")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "outbound",
        help="Ingest form responses and advance outbound shipments",
    )
    subparsers.add_parser("inbound", help="Discover inbound shipments and poll their tracking")
    subparsers.add_parser("pickup", help="Schedule a carrier pickup for printed labels")

    webhook = subparsers.add_parser("webhook", help="Ingest one form submission payload")
    webhook.add_argument(
        "--payload",
        type=Path,
        required=True,
        help="Path to the JSON body posted by the form's submit trigger ('-' for stdin)",
    )

    return parser.parse_args(list(argv))


def _load_payload(path: Path) -> FormSubmissionPayload:
    try:
        raw = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
        return FormSubmissionPayload.model_validate(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"Invalid webhook payload {path}: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        payload = _load_payload(parsed_args.payload) if parsed_args.command == "webhook" else None
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "outbound":
            result = sync_outbound()
            if result.reconcile.failed:
                log.warning(
                    "Shipments needing attention: %s",
                    ", ".join(str(shipment_id) for shipment_id in result.reconcile.failed),
                )
        elif parsed_args.command == "inbound":
            sync_inbound()
        elif parsed_args.command == "pickup":
            pickup = schedule_pickup()
            if pickup is None:
                log.info("Nothing to pick up")
            else:
                log.info(
                    "Pickup %s confirmed for %s (%s shipments)",
                    pickup.carrier_pickup_id,
                    pickup.pickup_date,
                    len(pickup.transactions),
                )
        elif parsed_args.command == "webhook" and payload is not None:
            shipment = ingest_webhook(payload)
            if shipment is not None:
                log.info("Stored outbound shipment %s", shipment.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
