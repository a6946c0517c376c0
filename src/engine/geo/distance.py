"""Great-circle distance on a spherical Earth.

Coordinates follow the GeoJSON convention: [lng, lat] in degrees.
"""

from __future__ import annotations

import math
from typing import Sequence

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the haversine distance in kilometers between two [lng, lat] points.

    NaN inputs produce NaN; range checking is left to the caller.
    """
    lng1, lat1 = a[0], a[1]
    lng2, lat2 = b[0], b[1]

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points
    if h > 1.0:
        h = 1.0
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
