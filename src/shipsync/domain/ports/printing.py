"""Port for the label printer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LabelPrinter(Protocol):
    async def print_label(self, label_url: str) -> None: ...
