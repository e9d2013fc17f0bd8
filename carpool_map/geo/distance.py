"""Great-circle distance between coordinates.

Used by check-in validation and for distance annotations on the map.
"""

import math
from typing import Tuple, Union

from ..domain.models import Coordinate

EARTH_RADIUS_M = 6_371_000.0

Point = Union[Coordinate, Tuple[float, float]]


def _pair(point: Point) -> Tuple[float, float]:
    if isinstance(point, Coordinate):
        return point.lat, point.lng
    return float(point[0]), float(point[1])


def haversine_m(a: Point, b: Point) -> float:
    """Compute the Haversine distance between two points.

    Parameters
    ----------
    a, b:
        Either ``Coordinate`` instances or ``(lat, lng)`` pairs in degrees.

    Returns
    -------
    float
        Distance in meters on a sphere of radius ``EARTH_RADIUS_M``.
    """
    lat1, lng1 = _pair(a)
    lat2, lng2 = _pair(b)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def format_distance(meters: float) -> str:
    """Render a distance for people.

    ``850`` -> ``"850m"``, ``1500`` -> ``"1.5km"``.
    """
    whole = round(meters)
    if whole < 1000:
        return f"{whole}m"
    return f"{meters / 1000:.1f}km"
