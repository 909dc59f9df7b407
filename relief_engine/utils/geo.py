"""
Great-circle distance helpers.
"""

import math
from typing import Optional, Tuple

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance in kilometers between two points
    on the earth (specified in decimal degrees).
    """
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def coordinates_of(item) -> Optional[Tuple[float, float]]:
    """Return (lat, lon) for a located snapshot, or None if incomplete."""
    lat = getattr(item, "latitude", None)
    lon = getattr(item, "longitude", None)
    if lat is None or lon is None:
        return None
    return lat, lon


def distance_between(a, b) -> Optional[float]:
    """Distance in km between two located snapshots; None when either lacks coordinates."""
    first = coordinates_of(a)
    second = coordinates_of(b)
    if first is None or second is None:
        return None
    return distance_km(first[0], first[1], second[0], second[1])
