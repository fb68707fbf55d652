"""Placeholder geocoding and great-circle distance.

``resolve`` derives a coordinate from the postal code's characters. It is not
a geocoder: it only spreads codes across a box around a fixed reference
point. A real lookup can replace it as long as it keeps the same signature.
"""

from __future__ import annotations

import math

from territory.core.config import (
    EARTH_RADIUS_MILES,
    PLACEHOLDER_CITY,
    PLACEHOLDER_STATE,
    REFERENCE_LATITUDE,
    REFERENCE_LONGITUDE,
)
from territory.domain.models import PostalCodeLocation


def _offset(postal_code: str) -> float:
    """Map the code's character-code sum into [-1.0, 0.99] degrees."""
    total = sum(ord(ch) for ch in postal_code)
    return (total % 200) / 100 - 1


def resolve(postal_code: str) -> PostalCodeLocation:
    offset = _offset(postal_code)
    return PostalCodeLocation(
        postal_code=postal_code,
        latitude=REFERENCE_LATITUDE + offset,
        longitude=REFERENCE_LONGITUDE + offset,
        city=PLACEHOLDER_CITY,
        state=PLACEHOLDER_STATE,
    )


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in miles. Inputs are not range-checked."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c
