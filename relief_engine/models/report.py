"""
Incident report snapshot model.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import AliasChoices, Field, field_validator

from .location import GeoLocated


class DisasterType(str, Enum):
    """Category of reported incident."""
    FIRE = "fire"
    FLOOD = "flood"
    EARTHQUAKE = "earthquake"
    STORM = "storm"
    ROAD_ACCIDENT = "road_accident"
    EPIDEMIC = "epidemic"
    LANDSLIDE = "landslide"
    GAS_LEAK = "gas_leak"
    BUILDING_COLLAPSE = "building_collapse"
    CHEMICAL_SPILL = "chemical_spill"
    POWER_OUTAGE = "power_outage"
    WATER_CONTAMINATION = "water_contamination"
    OTHER = "other"


class Severity(str, Enum):
    """Reported severity."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, Enum):
    """Report workflow status."""
    REPORTED = "reported"
    VERIFIED = "verified"
    RESPONDING = "responding"
    RESOLVED = "resolved"


class IncidentReport(GeoLocated):
    """A citizen-submitted incident report as read from the report store."""
    id: str
    title: str
    description: str
    # The platform stores the category in a "type" column
    category: DisasterType = Field(validation_alias=AliasChoices("category", "type"))
    severity: Severity
    status: ReportStatus = ReportStatus.REPORTED
    created_at: datetime
    similar_report_ids: List[str] = []

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from storage are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def sort_key(self):
        """Creation order with id as tie-break."""
        return self.created_at, self.id
