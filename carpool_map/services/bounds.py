"""Viewport bounds for the carpool map.

Collects the points currently drawn (venue, carpools, riders) and turns
them into at most one fit request for the rendering surface.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..domain.models import (
    CarpoolView,
    Coordinate,
    FitRequest,
    MapBounds,
    RiderRequest,
    ViewDirection,
)
from .carpool_aggregator import carpool_markers, filter_by_direction
from .rider_aggregator import filter_riders, rider_points

DEFAULT_PADDING = 50
DEFAULT_MAX_ZOOM = 13
DEFAULT_CENTER = Coordinate(43.65, -79.38)


def collect_points(
    venue: Optional[Coordinate],
    carpools: Iterable[CarpoolView],
    riders: Iterable[RiderRequest] = (),
    direction: ViewDirection = ViewDirection.ALL,
    show_riders: bool = True,
) -> MapBounds:
    """Every point that is drawn under the current view, each once.

    Args:
        venue: Event venue, if resolved.
        carpools: Aggregated carpools; hidden or off-direction ones are skipped.
        riders: Aggregated riders.
        direction: Current direction filter.
        show_riders: Rider-visibility toggle; riders add no points when off.

    Returns:
        MapBounds with points in drawing order, duplicates removed.
    """
    direction = ViewDirection.parse(direction)
    points: List[Coordinate] = []

    if venue is not None:
        points.append(venue)

    for view in filter_by_direction(carpools, direction):
        markers, _ = carpool_markers(view, direction)
        points.extend(marker.position for marker in markers)

    if show_riders:
        for rider in filter_riders(riders, direction):
            pickup, dropoff = rider_points(rider, direction)
            points.extend(p for p in (pickup, dropoff) if p is not None)

    return MapBounds(points=tuple(dict.fromkeys(points)))


def fit_request(
    bounds: MapBounds,
    padding: int = DEFAULT_PADDING,
    max_zoom: int = DEFAULT_MAX_ZOOM,
) -> Optional[FitRequest]:
    """A single fit request covering ``bounds``, or None for 0-1 points.

    The zoom cap keeps two nearby points from zooming in to street level.
    """
    if len(bounds.points) < 2:
        return None
    return FitRequest(points=bounds.points, padding=padding, max_zoom=max_zoom)


def map_center(
    venue: Optional[Coordinate],
    bounds: MapBounds,
    default: Coordinate = DEFAULT_CENTER,
) -> Coordinate:
    """Initial map center: the venue, else the first point, else ``default``."""
    if venue is not None:
        return venue
    if bounds.points:
        return bounds.points[0]
    return default
