"""
Resource request and aid offer snapshot models.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from .location import GeoLocated


class ResourceType(str, Enum):
    """Kind of resource requested or offered."""
    FOOD = "food"
    WATER = "water"
    SHELTER = "shelter"
    MEDICAL = "medical"
    CLOTHING = "clothing"
    BLANKETS = "blankets"
    OTHER = "other"


class Urgency(str, Enum):
    """Urgency of a resource request."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class AidOfferStatus(str, Enum):
    AVAILABLE = "available"
    COMMITTED = "committed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ResourceRequest(GeoLocated):
    """Demand side: a volunteer/NGO request for resources."""
    id: str
    resource_type: ResourceType
    quantity: int = Field(ge=0)
    urgency: Urgency = Urgency.MEDIUM
    status: RequestStatus = RequestStatus.PENDING
    description: Optional[str] = None


class AidOffer(GeoLocated):
    """Supply side: resources a volunteer can provide."""
    id: str
    resource_type: ResourceType
    quantity: int = Field(ge=0)
    status: AidOfferStatus = AidOfferStatus.AVAILABLE
    description: Optional[str] = None
