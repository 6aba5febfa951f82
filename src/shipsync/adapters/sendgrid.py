"""Transactional email through the SendGrid v3 API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.sendgrid import SendGridConfig, get_sendgrid_config
from shipsync.domain.errors import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.ports import EmailMessage, Notifier

log = getLogger(__name__)


class NotificationError(ExternalServiceError):
    service = "sendgrid"


def _recipients(addresses: tuple[str, ...]) -> list[dict[str, str]]:
    return [{"email": address} for address in addresses]


def message_payload(message: EmailMessage) -> dict[str, object]:
    personalization: dict[str, object] = {"to": _recipients(message.to)}
    # SendGrid rejects a personalization that lists the same address twice
    seen = set(message.to)
    cc = tuple(address for address in message.cc if address not in seen)
    seen.update(cc)
    bcc = tuple(address for address in message.bcc if address not in seen)
    if cc:
        personalization["cc"] = _recipients(cc)
    if bcc:
        personalization["bcc"] = _recipients(bcc)
    return {
        "personalizations": [personalization],
        "from": {"email": message.sender},
        "subject": message.subject,
        "content": [{"type": "text/plain", "value": message.body}],
    }


@dataclass(kw_only=True)
class SendGridNotifier(ServiceClient):
    error_type: ClassVar[type[ExternalServiceError]] = NotificationError

    config: SendGridConfig

    @classmethod
    def from_config(
        cls,
        config: SendGridConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> SendGridNotifier:
        resolved = config or get_sendgrid_config()
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    async def send(self, message: EmailMessage) -> None:
        await self._request(
            "POST",
            "mail/send",
            json=message_payload(message),
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )
        log.info("Sent email %r to %s", message.subject, ", ".join(message.to))


if TYPE_CHECKING:
    _notifier_check: Notifier = SendGridNotifier.from_config()
