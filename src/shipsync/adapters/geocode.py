"""Address geocoding through the Google Geocoding API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.geocode import GeocodeConfig, get_geocode_config
from shipsync.config.storage import get_storage_config
from shipsync.domain.errors import ExternalServiceError, ShipmentDataError
from shipsync.domain.ports import Coordinates

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.ports import Geocoder

log = getLogger(__name__)

STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"


class GeocodingError(ExternalServiceError):
    service = "geocode"


class _GeocodeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LatLng(_GeocodeModel):
    lat: float
    lng: float


class Geometry(_GeocodeModel):
    location: LatLng


class GeocodeResult(_GeocodeModel):
    formatted_address: str = ""
    geometry: Geometry


class GeocodeResponse(_GeocodeModel):
    status: str
    results: list[GeocodeResult] = Field(default_factory=list)
    error_message: str | None = None


def should_cache_payload(payload: object) -> bool:
    """Only successful lookups are worth keeping; quota errors must be retried later."""

    return isinstance(payload, dict) and payload.get("status") == STATUS_OK


@dataclass(kw_only=True)
class GoogleGeocoder(ServiceClient):
    error_type: ClassVar[type[ExternalServiceError]] = GeocodingError

    config: GeocodeConfig

    @classmethod
    def from_config(
        cls,
        config: GeocodeConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> GoogleGeocoder:
        resolved = config or get_geocode_config(
            cache_predicate=should_cache_payload,
            cache_path=str(get_storage_config().http_cache_path()),
        )
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    async def geocode(self, address: str) -> Coordinates:
        response = await self._request(
            "GET", "json", params={"address": address, "key": self.config.api_key}
        )
        payload = self._validate(GeocodeResponse, response)
        if payload.status == STATUS_ZERO_RESULTS or (
            payload.status == STATUS_OK and not payload.results
        ):
            raise ShipmentDataError(f"Address could not be geocoded: {address!r}")
        if payload.status != STATUS_OK:
            raise GeocodingError(
                f"Geocoding failed with {payload.status}: {payload.error_message or 'no details'}"
            )
        location = payload.results[0].geometry.location
        log.debug("Geocoded %r to %s,%s", address, location.lat, location.lng)
        return Coordinates(latitude=location.lat, longitude=location.lng)


if TYPE_CHECKING:
    _geocoder_check: Geocoder = GoogleGeocoder.from_config()
