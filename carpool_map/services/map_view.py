"""Map view service - Main orchestrator.

Loads an event's records from the store, runs the carpool and rider
aggregators and the bounds calculation for the current view state, and
hands the resulting scene to the renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import MapConfig, get_config
from ..domain.errors import RenderingError
from ..domain.models import (
    Carpool,
    CarpoolView,
    Coordinate,
    MapConnector,
    MapMarker,
    MapScene,
    MarkerKind,
    MarkerStyle,
    RiderRegistration,
    RiderRequest,
    TeamMember,
    ViewDirection,
    popup_html,
)
from ..ports.rendering import MapRendererPort
from ..ports.store import RecordStorePort
from .bounds import collect_points, fit_request, map_center
from .carpool_aggregator import (
    DEFAULT_PALETTE,
    VENUE_COLOR,
    aggregate_carpools,
    carpool_markers,
    filter_by_direction,
    split_on_map,
)
from .rider_aggregator import (
    aggregate_riders,
    filter_riders,
    rider_markers,
    unregistered_members,
)


@dataclass(frozen=True)
class ViewState:
    """User-controlled knobs of the map.

    Attributes:
        direction: Which legs to show
        show_riders: Whether riders are drawn at all
        show_all_riders: Include every rider with a location, not just
            those still needing a ride
    """

    direction: ViewDirection = ViewDirection.ALL
    show_riders: bool = True
    show_all_riders: bool = False


@dataclass(frozen=True)
class EventData:
    """Parsed records for one event."""

    event_id: str
    title: str
    venue: Optional[Coordinate]
    carpools: Tuple[Carpool, ...]
    registrations: Tuple[RiderRegistration, ...]
    members: Tuple[TeamMember, ...] = ()

    @classmethod
    def from_records(
        cls,
        event: Mapping[str, Any],
        carpools: Sequence[Mapping[str, Any]],
        registrations: Sequence[Mapping[str, Any]],
        members: Sequence[Mapping[str, Any]] = (),
    ) -> EventData:
        return cls(
            event_id=str(event.get("id", "")),
            title=str(event.get("venue") or event.get("title") or "Venue"),
            venue=Coordinate.parse(event.get("venue_lat"), event.get("venue_lng")),
            carpools=tuple(Carpool.from_record(r) for r in carpools),
            registrations=tuple(RiderRegistration.from_record(r) for r in registrations),
            members=tuple(
                TeamMember(
                    id=str(m.get("id", "")),
                    name=str(m.get("full_name") or m.get("name") or ""),
                    is_active=bool(m.get("is_active", True)),
                )
                for m in members
            ),
        )


@dataclass(frozen=True)
class MapView:
    """Everything computed for one (data, view state) pair."""

    state: ViewState
    carpools: Tuple[CarpoolView, ...]
    listed: Tuple[CarpoolView, ...]
    off_map: Tuple[CarpoolView, ...]
    riders: Tuple[RiderRequest, ...]
    scene: MapScene

    @property
    def has_location_data(self) -> bool:
        return bool(self.scene.markers)


@dataclass
class MapViewService:
    """Computes and renders the carpool map for an event.

    Loaded records are cached per event and computed views are memoised on
    ``(event data, view state)``, so different records never share a view.
    ``invalidate()`` drops both; wire it to the location writer so a save
    is picked up by the next build.

    Attributes:
        store: Record store
        renderer: Optional map renderer
        config: Map defaults (center, zoom, fit padding)
        palette: Carpool colour table
    """

    store: RecordStorePort
    renderer: Optional[MapRendererPort] = None
    config: MapConfig = field(default_factory=lambda: get_config().map)
    palette: Tuple[str, ...] = DEFAULT_PALETTE

    _data: Dict[str, EventData] = field(init=False, default_factory=dict, repr=False)
    _views: Dict[Tuple[EventData, ViewState], MapView] = field(
        init=False, default_factory=dict, repr=False
    )
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def invalidate(self) -> None:
        """Drop loaded records and memoised views."""
        self._data.clear()
        self._views.clear()

    async def load(self, event_id: str) -> EventData:
        """Fetch (or reuse) the records for ``event_id``."""
        data = self._data.get(event_id)
        if data is not None:
            return data

        event = await self.store.get_event(event_id)
        carpools = await self.store.list_carpools(event_id)
        registrations = await self.store.list_registrations(event_id)
        members = await self.store.list_members(event_id)

        data = EventData.from_records(event, carpools, registrations, members)
        self._data[event_id] = data
        self._logger.info(
            "Event records loaded",
            extra={
                "event_id": event_id,
                "carpools": len(data.carpools),
                "registrations": len(data.registrations),
            },
        )
        return data

    def compute(self, data: EventData, state: ViewState = ViewState()) -> MapView:
        """Aggregate records and lay out the scene for one view state."""
        key = (data, state)
        cached = self._views.get(key)
        if cached is not None:
            return cached

        direction = ViewDirection.parse(state.direction)
        views = aggregate_carpools(data.carpools, self.palette)
        riders = aggregate_riders(data.registrations, data.carpools, state.show_all_riders)
        listed = filter_by_direction(views, direction)
        _, off_map = split_on_map(listed)

        markers: List[MapMarker] = []
        connectors: List[MapConnector] = []

        if data.venue is not None:
            markers.append(
                MapMarker(
                    kind=MarkerKind.VENUE,
                    position=data.venue,
                    style=MarkerStyle(color=VENUE_COLOR),
                    title=data.title,
                    popup=popup_html(data.title),
                )
            )

        for view in listed:
            view_markers, view_connectors = carpool_markers(view, direction)
            markers.extend(view_markers)
            connectors.extend(view_connectors)

        if state.show_riders:
            for rider in filter_riders(riders, direction):
                view_markers, view_connectors = rider_markers(rider, direction)
                markers.extend(view_markers)
                connectors.extend(view_connectors)

        default_center = Coordinate(self.config.default_lat, self.config.default_lng)
        bounds = collect_points(data.venue, views, riders, direction, state.show_riders)
        scene = MapScene(
            center=map_center(data.venue, bounds, default_center),
            zoom=self.config.default_zoom,
            markers=tuple(markers),
            connectors=tuple(connectors),
            fit=fit_request(bounds, self.config.fit_padding, self.config.fit_max_zoom),
        )

        result = MapView(
            state=state,
            carpools=views,
            listed=tuple(listed),
            off_map=tuple(off_map),
            riders=riders,
            scene=scene,
        )
        self._views[key] = result
        self._logger.debug(
            "Map view computed",
            extra={
                "direction": direction.value,
                "markers": len(markers),
                "fit_points": len(bounds),
            },
        )
        return result

    async def build(self, event_id: str, state: ViewState = ViewState()) -> MapView:
        data = await self.load(event_id)
        return self.compute(data, state)

    async def render(
        self,
        event_id: str,
        output_path: Path,
        state: ViewState = ViewState(),
    ) -> Path:
        """Compute the view and write it through the renderer.

        Raises:
            RenderingError: If no renderer is configured or rendering fails.
        """
        if self.renderer is None:
            raise RenderingError(
                "No map renderer configured",
                output_path=str(output_path),
            )
        view = await self.build(event_id, state)
        path = self.renderer.render(view.scene, output_path)
        self._logger.info(
            "Map generated",
            extra={"path": str(path), "markers": len(view.scene.markers)},
        )
        return path

    async def unregistered_members(self, event_id: str) -> List[TeamMember]:
        """Active members without a registration for the event."""
        data = await self.load(event_id)
        return unregistered_members(data.members, data.registrations)
