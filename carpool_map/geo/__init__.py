"""Pure geographic helpers: link parsing and distances.

Nothing in this subpackage touches the network or the record store.
"""

from .distance import EARTH_RADIUS_M, format_distance, haversine_m
from .links import format_location_display, is_maps_link, maps_search_url, parse_maps_link

__all__ = [
    "EARTH_RADIUS_M",
    "format_distance",
    "haversine_m",
    "format_location_display",
    "is_maps_link",
    "maps_search_url",
    "parse_maps_link",
]
