"""
Pydantic snapshot models consumed by the correlation and matching engine.
"""

from .location import GeoLocated, SnapshotModel, parse_coordinate
from .report import (
    DisasterType,
    Severity,
    ReportStatus,
    IncidentReport,
)
from .resource import (
    ResourceType,
    Urgency,
    RequestStatus,
    AidOfferStatus,
    ResourceRequest,
    AidOffer,
)

__all__ = [
    # Location
    "GeoLocated",
    "SnapshotModel",
    "parse_coordinate",
    # Reports
    "DisasterType",
    "Severity",
    "ReportStatus",
    "IncidentReport",
    # Resources
    "ResourceType",
    "Urgency",
    "RequestStatus",
    "AidOfferStatus",
    "ResourceRequest",
    "AidOffer",
]
