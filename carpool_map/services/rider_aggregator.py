"""Rider aggregation for the map.

Merges rider registrations with the carpool rosters into RiderRequest
values: who still needs a ride, where to pick them up and drop them off,
and how to draw them.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..domain.models import (
    Carpool,
    Coordinate,
    MapConnector,
    MapMarker,
    MarkerKind,
    MarkerStyle,
    RiderRegistration,
    RiderRequest,
    TeamMember,
    ViewDirection,
    popup_html,
)

UNKNOWN_NAME = "Unknown"

PICKUP_COLOR = "#3b82f6"  # to the event
DROPOFF_COLOR = "#8b5cf6"  # from the event
BOTH_COLOR = "#10b981"  # same place both ways
RIDER_CONNECTOR_COLOR = "#94a3b8"

RIDER_MARKER_SIZE = 24


def initials_for(name: str) -> str:
    """Up to two initials from the first two words of ``name``."""
    tokens = [t for t in (name or "").split(" ") if t]
    letters = "".join(t[0] for t in tokens[:2]).upper()
    return letters or "?"


def assigned_rider_ids(carpools: Iterable[Carpool]) -> FrozenSet[str]:
    """Every user id on any carpool's passenger roster."""
    return frozenset(pid for carpool in carpools for pid in carpool.passengers)


def build_rider_request(
    registration: RiderRegistration, assigned: FrozenSet[str]
) -> RiderRequest:
    """Derive one rider's request from their registration and the rosters.

    ``same_location`` is the stored flag or exact equality of pickup and
    dropoff, and is only reported when both legs resolve to a position.
    When it holds the dropoff is suppressed and the pickup marker stands
    for both legs.
    """
    direction = registration.direction
    needs_to = direction.covers_to
    needs_from = direction.covers_from

    pickup = registration.pickup_coords if needs_to else None
    dropoff = registration.dropoff_coords if needs_from else None

    same_flag = registration.same_location or (
        registration.pickup_coords is not None
        and registration.pickup_coords == registration.dropoff_coords
    )
    same_location = same_flag and pickup is not None and dropoff is not None
    if same_location:
        dropoff = None

    name = registration.name or UNKNOWN_NAME
    return RiderRequest(
        registration_id=registration.id,
        user_id=registration.user_id,
        name=name,
        initials=initials_for(name),
        direction=direction,
        needs_to=needs_to,
        needs_from=needs_from,
        pickup=pickup,
        dropoff=dropoff,
        same_location=same_location,
        needs_ride=registration.needs_ride,
        is_passenger=registration.user_id in assigned,
        pickup_text=registration.pickup_text,
        dropoff_text=registration.dropoff_text,
    )


def aggregate_riders(
    registrations: Iterable[RiderRegistration],
    carpools: Sequence[Carpool],
    show_all: bool = False,
) -> Tuple[RiderRequest, ...]:
    """Build the rider list shown on the map.

    Args:
        registrations: Stored registrations.
        carpools: Current carpools with their passenger rosters.
        show_all: When False (default) only riders who need a ride and are
            not yet on any roster are included. When True every rider with
            at least one stored pickup or dropoff position is included.

    Returns:
        Rider requests, deduplicated by user (first registration wins).
    """
    assigned = assigned_rider_ids(carpools)
    seen: set[str] = set()
    riders: List[RiderRequest] = []

    for registration in registrations:
        if show_all:
            include = registration.has_any_location
        else:
            include = registration.needs_ride and registration.user_id not in assigned
        if not include:
            continue

        key = registration.user_id or registration.id
        if key in seen:
            continue
        seen.add(key)
        riders.append(build_rider_request(registration, assigned))

    return tuple(riders)


def filter_riders(
    riders: Iterable[RiderRequest], direction: ViewDirection
) -> List[RiderRequest]:
    """Riders relevant to a direction view."""
    direction = ViewDirection.parse(direction)
    if direction is ViewDirection.TO:
        return [r for r in riders if r.needs_to]
    if direction is ViewDirection.FROM:
        return [r for r in riders if r.needs_from]
    return list(riders)


def _style(color: str, initials: str) -> MarkerStyle:
    return MarkerStyle(color=color, label=initials, size=RIDER_MARKER_SIZE, shape="circle")


def rider_points(
    rider: RiderRequest, direction: ViewDirection
) -> Tuple[Optional[Coordinate], Optional[Coordinate]]:
    """Pickup and dropoff positions drawn for a rider under a view.

    In the ``from`` view the dropoff falls back to the pickup position,
    and a same-location rider keeps the combined pickup marker instead.
    """
    direction = ViewDirection.parse(direction)
    pickup: Optional[Coordinate] = None
    dropoff: Optional[Coordinate] = None
    if direction is ViewDirection.FROM:
        if rider.same_location:
            pickup = rider.pickup
        else:
            dropoff = rider.dropoff or rider.pickup
    else:
        pickup = rider.pickup
        if direction is ViewDirection.ALL:
            dropoff = rider.dropoff
    return pickup, dropoff


def rider_markers(
    rider: RiderRequest, direction: ViewDirection
) -> Tuple[List[MapMarker], List[MapConnector]]:
    """Markers and connector for one rider under a direction view."""
    direction = ViewDirection.parse(direction)
    pickup, dropoff = rider_points(rider, direction)
    markers: List[MapMarker] = []
    connectors: List[MapConnector] = []

    if pickup is not None:
        if rider.same_location:
            kind, color, label = MarkerKind.RIDER_BOTH, BOTH_COLOR, "Pickup & Drop-off"
        else:
            kind, color, label = MarkerKind.RIDER_PICKUP, PICKUP_COLOR, "Pickup"
        markers.append(
            MapMarker(
                kind=kind,
                position=pickup,
                style=_style(color, rider.initials),
                title=rider.name,
                popup=popup_html(
                    rider.name, f"{label}: {rider.pickup_text or pickup.label()}"
                ),
                owner_id=rider.registration_id,
            )
        )

    if dropoff is not None:
        place = rider.dropoff_text if rider.dropoff else rider.pickup_text
        markers.append(
            MapMarker(
                kind=MarkerKind.RIDER_DROPOFF,
                position=dropoff,
                style=_style(DROPOFF_COLOR, rider.initials),
                title=rider.name,
                popup=popup_html(rider.name, f"Drop-off: {place or 'Same as pickup'}"),
                owner_id=rider.registration_id,
            )
        )

    if (
        direction is ViewDirection.ALL
        and rider.pickup is not None
        and rider.dropoff is not None
        and not rider.same_location
    ):
        connectors.append(
            MapConnector(
                start=rider.pickup,
                end=rider.dropoff,
                color=RIDER_CONNECTOR_COLOR,
                owner_id=rider.registration_id,
            )
        )

    return markers, connectors


def unregistered_members(
    members: Iterable[TeamMember], registrations: Iterable[RiderRegistration]
) -> List[TeamMember]:
    """Active team members who have not registered for the event."""
    registered = {r.user_id for r in registrations}
    return [m for m in members if m.is_active and m.id not in registered]
