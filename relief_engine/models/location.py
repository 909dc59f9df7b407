"""
Shared location handling for reports, requests and offers.
"""

import math
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Base for read-only snapshots handed to the engine by callers."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
    )


def parse_coordinate(value: Any, limit: float) -> Optional[float]:
    """
    Coerce a stored coordinate into a float.

    The platform keeps coordinates as text, so numeric strings are accepted.
    Blank, unparsable, non-finite and out-of-range values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


class GeoLocated(SnapshotModel):
    """Mixin for anything with a free-text location and optional coordinates."""
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("latitude", mode="before")
    @classmethod
    def _clean_latitude(cls, value: Any) -> Optional[float]:
        return parse_coordinate(value, 90.0)

    @field_validator("longitude", mode="before")
    @classmethod
    def _clean_longitude(cls, value: Any) -> Optional[float]:
        return parse_coordinate(value, 180.0)

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(latitude, longitude), or None unless both are present."""
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude
