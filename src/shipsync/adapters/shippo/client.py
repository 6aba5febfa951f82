"""HTTP client for the Shippo carrier API."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.shippo import ShippoConfig, get_shippo_config
from shipsync.domain.errors import ExternalServiceError

from .schema import (
    CarrierAccountsPage,
    CustomsItemResponse,
    PickupResponse,
    ShipmentResponse,
    TrackResponse,
    TransactionResponse,
)
from .translator import (
    address_payload,
    customs_item_payload,
    parcel_payload,
    parse_carrier_account,
    parse_label,
    parse_pickup,
    parse_rate,
    parse_tracking_status,
    pickup_payload,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.ports import (
        CarrierAccount,
        CarrierGateway,
        CustomsDeclaration,
        Label,
        PickupConfirmation,
        PickupRequest,
        Rate,
        ShipmentRequest,
        TrackingStatus,
    )

log = getLogger(__name__)

LABEL_FILE_TYPE = "PDF_4x6"
_ACCOUNTS_PAGE_SIZE = 100


class CarrierAPIError(ExternalServiceError):
    """Raised when the Shippo API fails or answers with an unusable payload."""

    service = "shippo"


@dataclass(kw_only=True)
class ShippoGateway(ServiceClient):
    """:class:`CarrierGateway` backed by Shippo."""

    error_type: ClassVar[type[ExternalServiceError]] = CarrierAPIError

    config: ShippoConfig

    @classmethod
    def from_config(
        cls,
        config: ShippoConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> ShippoGateway:
        resolved = config or get_shippo_config()
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"ShippoToken {self.config.api_token}"}

    async def quote(self, request: ShipmentRequest) -> list[Rate]:
        payload: dict[str, object] = {
            "address_from": address_payload(request.sender),
            "address_to": address_payload(request.recipient),
            "parcels": [parcel_payload(parcel) for parcel in request.parcels],
            "async": False,
        }
        if request.customs is not None:
            payload["customs_declaration"] = await self._customs_payload(request.customs)

        response = await self._request("POST", "shipments/", json=payload, headers=self._headers)
        shipment = self._validate(ShipmentResponse, response)
        log.debug("Shippo shipment %s offered %s rates", shipment.object_id, len(shipment.rates))
        return [parse_rate(rate) for rate in shipment.rates]

    async def _customs_payload(self, customs: CustomsDeclaration) -> dict[str, object]:
        item_ids: list[str] = []
        for item in customs.items:
            response = await self._request(
                "POST", "customs/items/", json=customs_item_payload(item), headers=self._headers
            )
            item_ids.append(self._validate(CustomsItemResponse, response).object_id)
        return {
            "certify": customs.certify,
            "certify_signer": customs.certify_signer,
            "contents_type": customs.contents_type,
            "contents_explanation": customs.contents_explanation,
            "non_delivery_option": customs.non_delivery_option,
            "eel_pfc": customs.eel_pfc,
            "items": item_ids,
        }

    async def purchase_label(self, rate: Rate) -> Label:
        response = await self._request(
            "POST",
            "transactions/",
            json={"rate": rate.rate_id, "async": False, "label_file_type": LABEL_FILE_TYPE},
            headers=self._headers,
        )
        return parse_label(self._validate(TransactionResponse, response))

    async def get_tracking_status(self, carrier: str, tracking_number: str) -> TrackingStatus:
        response = await self._request(
            "GET", f"tracks/{carrier}/{tracking_number}", headers=self._headers
        )
        track = self._validate(TrackResponse, response)
        return parse_tracking_status(track, carrier=carrier, tracking_number=tracking_number)

    async def register_tracking_webhook(self, carrier: str, tracking_number: str) -> None:
        await self._request(
            "POST",
            "tracks/",
            json={"carrier": carrier, "tracking_number": tracking_number},
            headers=self._headers,
        )

    async def list_carrier_accounts(self) -> list[CarrierAccount]:
        accounts: list[CarrierAccount] = []
        url: str | None = "carrier_accounts/"
        params: dict[str, int] | None = {"results": _ACCOUNTS_PAGE_SIZE}
        while url:
            response = await self._request("GET", url, params=params, headers=self._headers)
            page = self._validate(CarrierAccountsPage, response)
            accounts.extend(parse_carrier_account(account) for account in page.results)
            # ``next`` is an absolute URL that already carries the paging parameters
            url = page.next
            params = None
        return accounts

    async def create_pickup(self, request: PickupRequest) -> PickupConfirmation:
        response = await self._request(
            "POST", "pickups/", json=pickup_payload(request), headers=self._headers
        )
        return parse_pickup(self._validate(PickupResponse, response))


if TYPE_CHECKING:
    _gateway_check: CarrierGateway = ShippoGateway.from_config()
