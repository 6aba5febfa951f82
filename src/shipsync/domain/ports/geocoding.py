"""Port for turning postal addresses into coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@runtime_checkable
class Geocoder(Protocol):
    async def geocode(self, address: str) -> Coordinates: ...
