"""Port for transactional email."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class EmailMessage:
    subject: str
    body: str
    to: tuple[str, ...]
    sender: str
    cc: tuple[str, ...] = ()
    bcc: tuple[str, ...] = ()


@runtime_checkable
class Notifier(Protocol):
    async def send(self, message: EmailMessage) -> None: ...
