"""Domain port definitions for adapters."""

from __future__ import annotations

from .carrier import (
    CarrierAccount,
    CarrierGateway,
    CustomsDeclaration,
    CustomsItem,
    Label,
    Parcel,
    PickupConfirmation,
    PickupRequest,
    PostalAddress,
    Rate,
    ShipmentRequest,
    TrackingEvent,
    TrackingStatus,
)
from .geocoding import Coordinates, Geocoder
from .intake import IntakeCandidate, RowSource
from .mirror import InboundMirror, OutboundMirror, PickupMirror, ShipmentMirror
from .notifications import EmailMessage, Notifier
from .persistence import (
    InboundShipmentRepository,
    OutboundShipmentRepository,
    PackagePickupRepository,
    ShipmentRepository,
)
from .printing import LabelPrinter
from .unit_of_work import (
    RepositoryCollection,
    ShipmentRepositories,
    ShipmentUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "CarrierAccount",
    "CarrierGateway",
    "Coordinates",
    "CustomsDeclaration",
    "CustomsItem",
    "EmailMessage",
    "Geocoder",
    "InboundMirror",
    "InboundShipmentRepository",
    "IntakeCandidate",
    "Label",
    "LabelPrinter",
    "Notifier",
    "OutboundMirror",
    "OutboundShipmentRepository",
    "PackagePickupRepository",
    "Parcel",
    "PickupConfirmation",
    "PickupMirror",
    "PickupRequest",
    "PostalAddress",
    "Rate",
    "RepositoryCollection",
    "RowSource",
    "ShipmentMirror",
    "ShipmentRepositories",
    "ShipmentRepository",
    "ShipmentRequest",
    "ShipmentUnitOfWork",
    "TrackingEvent",
    "TrackingStatus",
    "UnitOfWork",
]
