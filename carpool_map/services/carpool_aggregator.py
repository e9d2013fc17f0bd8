"""Carpool aggregation for the map.

Attaches resolved departure/return positions and a stable marker identity
to every carpool, and lays out the markers for a given direction view.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from ..domain.models import (
    Carpool,
    CarpoolView,
    Coordinate,
    MapConnector,
    MapMarker,
    MarkerKind,
    MarkerStyle,
    ViewDirection,
    popup_html,
)
from ..geo.links import parse_maps_link

# Blue, green, purple, amber, pink, cyan, lime, orange.
DEFAULT_PALETTE: Tuple[str, ...] = (
    "#3b82f6",
    "#10b981",
    "#8b5cf6",
    "#f59e0b",
    "#ec4899",
    "#06b6d4",
    "#84cc16",
    "#f97316",
)

VENUE_COLOR = "#ef4444"

MARKER_SIZE = 32
RETURN_MARKER_SIZE = 26


def resolve_point(
    coords: Optional[Coordinate], link: Optional[str]
) -> Optional[Coordinate]:
    """Stored coordinates win; otherwise try the stored maps link."""
    if coords is not None:
        return coords
    if link:
        return parse_maps_link(link).coordinate
    return None


def marker_styles(index: int, palette: Sequence[str] = DEFAULT_PALETTE) -> Tuple[MarkerStyle, MarkerStyle]:
    """Departure and return marker styles for the carpool at ``index``.

    The return marker reuses the departure colour with a smaller size and
    a different shape so the pair reads as one carpool.
    """
    color = palette[index % len(palette)]
    number = index + 1
    departure = MarkerStyle(color=color, label=str(number), size=MARKER_SIZE, shape="pin")
    ret = MarkerStyle(
        color=color,
        label=f"{number}R",
        size=RETURN_MARKER_SIZE,
        shape="return",
        opacity=0.85,
    )
    return departure, ret


def aggregate_carpools(
    carpools: Iterable[Carpool],
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> Tuple[CarpoolView, ...]:
    """Augment carpools, in display order, with positions and markers.

    Args:
        carpools: Stored carpools in display order.
        palette: Colour table cycled by index.

    Returns:
        One CarpoolView per carpool, same order.
    """
    views: List[CarpoolView] = []
    for index, carpool in enumerate(carpools):
        departure_style, return_style = marker_styles(index, palette)
        views.append(
            CarpoolView(
                carpool=carpool,
                index=index,
                color=departure_style.color,
                marker=departure_style,
                return_marker=return_style,
                departure=resolve_point(carpool.departure_coords, carpool.departure_link),
                return_point=resolve_point(carpool.return_coords, carpool.return_link),
            )
        )
    return tuple(views)


def filter_by_direction(
    views: Iterable[CarpoolView], direction: ViewDirection
) -> List[CarpoolView]:
    """Carpools listed under a direction view.

    In the ``to`` and ``from`` views only carpools covering that leg are
    listed. Hidden carpools are never listed.
    """
    direction = ViewDirection.parse(direction)
    listed = []
    for view in views:
        if not view.carpool.visible:
            continue
        if direction is ViewDirection.TO and not view.carpool.direction.covers_to:
            continue
        if direction is ViewDirection.FROM and not view.carpool.direction.covers_from:
            continue
        listed.append(view)
    return listed


def split_on_map(
    views: Iterable[CarpoolView],
) -> Tuple[List[CarpoolView], List[CarpoolView]]:
    """Split carpools into those with a departure position and those without."""
    on_map: List[CarpoolView] = []
    off_map: List[CarpoolView] = []
    for view in views:
        (on_map if view.on_map else off_map).append(view)
    return on_map, off_map


def _popup(view: CarpoolView, leg: str, place: Optional[str]) -> str:
    carpool = view.carpool
    return popup_html(
        f"Carpool #{view.number} ({leg})",
        f"Driver: {carpool.driver_name}" if carpool.driver_name else None,
        place,
        f"Seats: {carpool.available_seats}/{carpool.total_seats} available",
    )


def carpool_markers(
    view: CarpoolView, direction: ViewDirection
) -> Tuple[List[MapMarker], List[MapConnector]]:
    """Markers and connector for one carpool under a direction view.

    - ``to``: departure only.
    - ``from``: the return point, or the departure when no return resolved;
      a carpool never disappears just because no return was set.
    - ``all``: departure, plus return marker and connector when the return
      differs from the departure.

    Carpools without a departure position produce nothing.
    """
    direction = ViewDirection.parse(direction)
    if view.departure is None:
        return [], []

    carpool = view.carpool
    markers: List[MapMarker] = []
    connectors: List[MapConnector] = []
    title = f"Carpool #{view.number}"

    show_departure = direction in (ViewDirection.ALL, ViewDirection.TO)
    show_return = direction is ViewDirection.FROM or (
        direction is ViewDirection.ALL and view.has_distinct_return
    )

    if show_departure:
        markers.append(
            MapMarker(
                kind=MarkerKind.CARPOOL_DEPARTURE,
                position=view.departure,
                style=view.marker,
                title=title,
                popup=_popup(view, "departure", carpool.departure_text),
                owner_id=carpool.id,
            )
        )

    return_position = view.return_point or view.departure
    if show_return:
        markers.append(
            MapMarker(
                kind=MarkerKind.CARPOOL_RETURN,
                position=return_position,
                style=view.return_marker,
                title=f"{title} return",
                popup=_popup(view, "return trip", carpool.return_text or carpool.departure_text),
                owner_id=carpool.id,
            )
        )

    if direction is ViewDirection.ALL and return_position != view.departure:
        connectors.append(
            MapConnector(
                start=view.departure,
                end=return_position,
                color=view.color,
                owner_id=carpool.id,
            )
        )

    return markers, connectors
