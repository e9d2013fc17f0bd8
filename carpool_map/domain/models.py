"""Immutable domain models for the carpool map.

All models are frozen dataclasses with slots. They carry no external
dependencies and describe the records the map works with: stored
carpools and rider registrations, and the values derived from them
(resolved locations, rider requests, markers, bounds).
"""

from __future__ import annotations

import html
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class Direction(str, Enum):
    """Which leg of the trip a ride or need covers."""

    TO = "to"
    FROM = "from"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Parse a stored direction, defaulting to BOTH."""
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.BOTH

    @property
    def covers_to(self) -> bool:
        return self in (Direction.TO, Direction.BOTH)

    @property
    def covers_from(self) -> bool:
        return self in (Direction.FROM, Direction.BOTH)


class ViewDirection(str, Enum):
    """Direction filter applied to the map."""

    ALL = "all"
    TO = "to"
    FROM = "from"

    @classmethod
    def parse(cls, value: Any) -> ViewDirection:
        if isinstance(value, ViewDirection):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALL


class SourceKind(str, Enum):
    """Provenance of a resolved location."""

    STORED = "stored"
    LINK = "link"
    SEARCH = "search"


def _as_float(value: Any) -> Optional[float]:
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
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 latitude/longitude pair."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not is_valid_lat_lng(self.lat, self.lng):
            raise ValueError(
                f"Coordinate out of range: lat={self.lat}, lng={self.lng}"
            )

    @classmethod
    def parse(cls, lat: Any, lng: Any) -> Optional[Coordinate]:
        """Build a coordinate from loosely typed stored values.

        Missing, non-numeric, non-finite and out-of-range values are
        treated as absent and yield None.
        """
        lat_f = _as_float(lat)
        lng_f = _as_float(lng)
        if lat_f is None or lng_f is None:
            return None
        if not is_valid_lat_lng(lat_f, lng_f):
            return None
        return cls(lat=lat_f, lng=lng_f)

    def as_pair(self) -> tuple[float, float]:
        return (self.lat, self.lng)

    def label(self, precision: int = 5) -> str:
        """Plain-text rendering, e.g. ``"43.65000, -79.38000"``."""
        return f"{self.lat:.{precision}f}, {self.lng:.{precision}f}"


def is_valid_lat_lng(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


@dataclass(frozen=True, slots=True)
class Location:
    """A resolved location as shown in an editing field.

    Attributes:
        coordinate: Canonical coordinate
        display_name: Text shown to the user
        source_kind: Where the coordinate came from
    """

    coordinate: Coordinate
    display_name: str
    source_kind: SourceKind

    @property
    def lat(self) -> float:
        return self.coordinate.lat

    @property
    def lng(self) -> float:
        return self.coordinate.lng

    @property
    def from_link(self) -> bool:
        return self.source_kind is SourceKind.LINK


@dataclass(frozen=True, slots=True)
class LinkParseResult:
    """Outcome of parsing a pasted mapping-service URL."""

    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    is_valid_link: bool = False
    has_coordinates: bool = False

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if not self.has_coordinates:
            return None
        return Coordinate.parse(self.lat, self.lng)


@dataclass(frozen=True, slots=True)
class GeocodeCandidate:
    """A single geocoding search hit.

    Attributes:
        display_name: Full name returned by the service
        lat: Latitude
        lng: Longitude
        short_name: Compact "road, city, state" form when available
        address_detail: Raw address components
        place_type: Service-specific place type
    """

    display_name: str
    lat: float
    lng: float
    short_name: str = ""
    address_detail: Mapping[str, str] = field(default_factory=dict)
    place_type: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)

    def label(self, prefer_short: bool = True) -> str:
        """Text to put in the input box once this candidate is picked."""
        if prefer_short and self.short_name:
            return self.short_name
        return ",".join(self.display_name.split(",")[:3])


@dataclass(frozen=True, slots=True)
class Carpool:
    """A driver-offered ride, as stored.

    Attributes:
        id: Record identifier
        driver_id: User id of the driver
        total_seats: Seat capacity
        passengers: User ids of riders on the roster
        departure_text: Free-text departure location
        departure_coords: Stored departure coordinates
        departure_link: Stored mapping-service link for the departure
        return_text: Free-text return (final) location
        return_coords: Stored return coordinates
        return_link: Stored mapping-service link for the return
        direction: Which legs the carpool covers
        visible: Whether the carpool is shown on the map
    """

    id: str
    driver_id: str
    total_seats: int = 0
    passengers: tuple[str, ...] = field(default_factory=tuple)
    departure_text: str = ""
    departure_coords: Optional[Coordinate] = None
    departure_link: Optional[str] = None
    return_text: Optional[str] = None
    return_coords: Optional[Coordinate] = None
    return_link: Optional[str] = None
    direction: Direction = Direction.BOTH
    visible: bool = True
    driver_name: str = ""

    @property
    def available_seats(self) -> int:
        return max(self.total_seats - len(self.passengers), 0)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Carpool:
        """Build a carpool from a stored row.

        Passengers may be given as plain ids or as roster rows carrying a
        ``passenger_id`` key.
        """
        passengers = []
        for entry in record.get("passengers") or ():
            if isinstance(entry, Mapping):
                pid = entry.get("passenger_id")
            else:
                pid = entry
            if pid is not None:
                passengers.append(str(pid))

        driver = record.get("driver") or {}
        try:
            total_seats = int(record.get("total_seats") or 0)
        except (TypeError, ValueError):
            total_seats = 0

        return cls(
            id=str(record["id"]),
            driver_id=str(record.get("driver_id") or ""),
            driver_name=str(record.get("driver_name") or driver.get("full_name") or ""),
            total_seats=total_seats,
            passengers=tuple(passengers),
            departure_text=record.get("departure_location") or "",
            departure_coords=Coordinate.parse(
                record.get("departure_lat"), record.get("departure_lng")
            ),
            departure_link=record.get("departure_location_link") or None,
            return_text=record.get("final_location") or None,
            return_coords=Coordinate.parse(
                record.get("final_lat"), record.get("final_lng")
            ),
            return_link=record.get("final_location_link") or None,
            direction=Direction.parse(record.get("carpool_direction")),
            visible=record.get("visible", True) is not False,
        )


NEED_RIDE = "need_ride"


@dataclass(frozen=True, slots=True)
class RiderRegistration:
    """A rider's stored event registration (carpool fields only)."""

    id: str
    user_id: str
    name: str = ""
    carpool_needs: Optional[str] = None
    direction: Direction = Direction.BOTH
    pickup_text: Optional[str] = None
    pickup_coords: Optional[Coordinate] = None
    dropoff_text: Optional[str] = None
    dropoff_coords: Optional[Coordinate] = None
    same_location: bool = False

    @property
    def needs_ride(self) -> bool:
        return self.carpool_needs == NEED_RIDE

    @property
    def has_any_location(self) -> bool:
        return self.pickup_coords is not None or self.dropoff_coords is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RiderRegistration:
        profile = record.get("profile") or record.get("user_profile") or {}
        return cls(
            id=str(record["id"]),
            user_id=str(record.get("user_id") or ""),
            name=str(record.get("name") or profile.get("full_name") or ""),
            carpool_needs=record.get("carpool_needs"),
            direction=Direction.parse(record.get("carpool_direction")),
            pickup_text=record.get("carpool_departure_location") or None,
            pickup_coords=Coordinate.parse(
                record.get("carpool_departure_lat"),
                record.get("carpool_departure_lng"),
            ),
            dropoff_text=record.get("carpool_return_location") or None,
            dropoff_coords=Coordinate.parse(
                record.get("carpool_return_lat"),
                record.get("carpool_return_lng"),
            ),
            same_location=bool(record.get("carpool_return_same_as_departure")),
        )


@dataclass(frozen=True, slots=True)
class RiderRequest:
    """Derived transportation need for one rider.

    ``pickup`` is only set when the rider needs the outbound leg, and
    ``dropoff`` only when they need the return leg at a different place
    than the pickup.
    """

    registration_id: str
    user_id: str
    name: str
    initials: str
    direction: Direction
    needs_to: bool
    needs_from: bool
    pickup: Optional[Coordinate]
    dropoff: Optional[Coordinate]
    same_location: bool
    needs_ride: bool
    is_passenger: bool
    pickup_text: Optional[str] = None
    dropoff_text: Optional[str] = None

    @property
    def on_map(self) -> bool:
        return self.pickup is not None or self.dropoff is not None


@dataclass(frozen=True, slots=True)
class TeamMember:
    """A roster member, used to list people without a registration."""

    id: str
    name: str = ""
    is_active: bool = True


class MarkerKind(str, Enum):
    VENUE = "venue"
    CARPOOL_DEPARTURE = "carpool_departure"
    CARPOOL_RETURN = "carpool_return"
    RIDER_PICKUP = "rider_pickup"
    RIDER_DROPOFF = "rider_dropoff"
    RIDER_BOTH = "rider_both"


@dataclass(frozen=True, slots=True)
class MarkerStyle:
    """Visual identity of a map marker."""

    color: str
    label: str = ""
    size: int = 32
    shape: str = "pin"
    opacity: float = 1.0


def popup_html(*lines: Optional[str]) -> str:
    """Join text lines into popup HTML, escaping each line."""
    return "<br>".join(html.escape(line) for line in lines if line)


@dataclass(frozen=True, slots=True)
class MapMarker:
    """A marker to place on the rendering surface."""

    kind: MarkerKind
    position: Coordinate
    style: MarkerStyle
    title: str = ""
    popup: str = ""  # HTML; build it with popup_html
    owner_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MapConnector:
    """A dashed line between two related markers."""

    start: Coordinate
    end: Coordinate
    color: str
    owner_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CarpoolView:
    """A carpool augmented with resolved positions and marker identity.

    Attributes:
        carpool: The stored carpool
        index: Position in display order (0-based)
        color: Palette colour for this carpool
        marker: Departure marker style
        return_marker: Return marker style (same colour, smaller, alternate shape)
        departure: Resolved departure coordinate, if any
        return_point: Resolved return coordinate, if any
    """

    carpool: Carpool
    index: int
    color: str
    marker: MarkerStyle
    return_marker: MarkerStyle
    departure: Optional[Coordinate] = None
    return_point: Optional[Coordinate] = None

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def on_map(self) -> bool:
        return self.departure is not None

    @property
    def has_distinct_return(self) -> bool:
        return (
            self.departure is not None
            and self.return_point is not None
            and self.return_point != self.departure
        )

    @property
    def return_position(self) -> Optional[Coordinate]:
        """Where the return marker goes: the return point, else departure."""
        return self.return_point or self.departure


@dataclass(frozen=True, slots=True)
class MapBounds:
    """Coordinate points a viewport should contain."""

    points: tuple[Coordinate, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points


@dataclass(frozen=True, slots=True)
class FitRequest:
    """A single viewport-fit request for the rendering surface."""

    points: tuple[Coordinate, ...]
    padding: int
    max_zoom: int


@dataclass(frozen=True, slots=True)
class MapScene:
    """Everything the renderer needs for one frame of the map."""

    center: Coordinate
    zoom: int
    markers: tuple[MapMarker, ...] = field(default_factory=tuple)
    connectors: tuple[MapConnector, ...] = field(default_factory=tuple)
    fit: Optional[FitRequest] = None


class CheckInStatus(str, Enum):
    OK = "ok"
    TOO_FAR = "too_far"
    NO_VENUE = "no_venue"


@dataclass(frozen=True, slots=True)
class CheckInResult:
    """Outcome of a proximity check against the venue."""

    status: CheckInStatus
    distance_m: Optional[float] = None
    radius_m: Optional[float] = None
    label: Optional[str] = None

    @property
    def within_radius(self) -> bool:
        return self.status is not CheckInStatus.TOO_FAR
