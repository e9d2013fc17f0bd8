"""Location resolver service.

Turns what a user types into a location field into a canonical location:
a pasted maps link with coordinates is adopted at once, free text is
debounced into a single geocoding query, and a map click overrides both.

One resolver instance backs one location field.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..config import SearchConfig, get_config
from ..domain.models import Coordinate, GeocodeCandidate, Location, SourceKind
from ..geo.links import parse_maps_link
from ..ports.geocoding import GeocoderPort


@dataclass
class ResolverState:
    """What the location field currently shows.

    Attributes:
        text: Raw field text
        location: Resolved location, None while the text is unresolved
        candidates: Geocoding suggestions for the current text
        link_without_coordinates: The text is a maps link that carried no
            coordinates (it was searched as free text instead)
        searching: A geocoding query is pending or in flight
    """

    text: str = ""
    location: Optional[Location] = None
    candidates: Tuple[GeocodeCandidate, ...] = ()
    link_without_coordinates: bool = False
    searching: bool = False


@dataclass
class LocationResolver:
    """Resolves one location field from links, searches and map picks.

    Newer edits always win: every edit bumps a revision counter, cancels the
    pending debounce task, and any geocoding result that comes back for an
    older revision is dropped.

    Attributes:
        geocoder: Geocoding backend (blocking, run in a worker thread)
        config: Debounce delay and minimum query length
        result_limit: Maximum candidates requested per query
    """

    geocoder: GeocoderPort
    config: SearchConfig = field(default_factory=lambda: get_config().search)
    result_limit: int = 5

    state: ResolverState = field(init=False)
    _revision: int = field(init=False, default=0, repr=False)
    _pending: Optional[asyncio.Task] = field(init=False, default=None, repr=False)
    _adopted_text: Optional[str] = field(init=False, default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.state = ResolverState()
        self._logger = logging.getLogger(__name__)

    @property
    def location(self) -> Optional[Location]:
        return self.state.location

    @property
    def candidates(self) -> Tuple[GeocodeCandidate, ...]:
        return self.state.candidates

    @property
    def revision(self) -> int:
        return self._revision

    def _supersede(self) -> int:
        """Invalidate any pending or in-flight query and return the new revision."""
        self._revision += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self.state.searching = False
        return self._revision

    async def on_input(self, text: str) -> None:
        """Handle an edit of the field text.

        Must be awaited from a running event loop; the debounced query runs
        as a background task (see ``wait_idle``).
        """
        text = text or ""
        if self._adopted_text is not None and text == self._adopted_text:
            # Echo of the link we just adopted; not a new edit.
            return
        self._adopted_text = None

        revision = self._supersede()
        self.state.text = text
        self.state.location = None
        self.state.link_without_coordinates = False

        parsed = parse_maps_link(text)
        coordinate = parsed.coordinate
        if coordinate is not None:
            self.state.location = Location(
                coordinate=coordinate,
                display_name=parsed.name or coordinate.label(),
                source_kind=SourceKind.LINK,
            )
            self.state.candidates = ()
            self._adopted_text = text
            self._logger.info(
                "Adopted coordinates from maps link",
                extra={"lat": coordinate.lat, "lng": coordinate.lng},
            )
            return

        if parsed.is_valid_link:
            self.state.link_without_coordinates = True
            self._logger.info("Maps link has no coordinates, searching as text")

        query = text.strip()
        if len(query) < self.config.min_query_length:
            self.state.candidates = ()
            return

        self.state.searching = True
        self._pending = asyncio.create_task(self._debounced_search(query, revision))

    async def _debounced_search(self, query: str, revision: int) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        if revision != self._revision:
            return

        results = await self.search(query)

        if revision != self._revision:
            self._logger.debug(
                "Dropping stale geocoding results",
                extra={"revision": revision, "current": self._revision},
            )
            return
        self.state.candidates = tuple(results)
        self.state.searching = False

    async def search(self, query: str) -> List[GeocodeCandidate]:
        """Geocode ``query`` directly, without debouncing.

        Queries shorter than the minimum length return ``[]`` without
        touching the geocoder. Failures also yield ``[]``.
        """
        query = (query or "").strip()
        if len(query) < self.config.min_query_length:
            return []
        try:
            results: Sequence[GeocodeCandidate] = await asyncio.to_thread(
                self.geocoder.search, query, self.result_limit
            )
        except Exception as e:
            self._logger.warning(
                "Geocoding search failed",
                extra={"query": query, "error": str(e)},
            )
            return []
        return list(results)

    async def wait_idle(self) -> None:
        """Wait for the pending debounced query, if any, to settle."""
        pending = self._pending
        if pending is None:
            return
        try:
            await pending
        except asyncio.CancelledError:
            if not pending.cancelled():
                raise

    def select_candidate(self, candidate: GeocodeCandidate, prefer_short: bool = True) -> Location:
        """Adopt a geocoding suggestion."""
        self._supersede()
        label = candidate.label(prefer_short)
        location = Location(
            coordinate=candidate.coordinate,
            display_name=label,
            source_kind=SourceKind.SEARCH,
        )
        self.state.text = label
        self.state.location = location
        self.state.candidates = ()
        self.state.link_without_coordinates = False
        return location

    def set_from_map(self, coordinate: Coordinate, display_name: Optional[str] = None) -> Location:
        """Override the field with a position picked on a map."""
        self._supersede()
        label = display_name or coordinate.label()
        location = Location(
            coordinate=coordinate,
            display_name=label,
            source_kind=SourceKind.STORED,
        )
        self.state.text = label
        self.state.location = location
        self.state.candidates = ()
        self.state.link_without_coordinates = False
        return location

    async def pick_on_map(self, coordinate: Coordinate) -> Optional[Location]:
        """Reverse geocode a map click, falling back to the coordinate text.

        Returns None, leaving the field untouched, when the field was edited
        again while the lookup was in flight.
        """
        revision = self._supersede()
        try:
            found = await asyncio.to_thread(self.geocoder.reverse, coordinate)
        except Exception as e:
            self._logger.warning(
                "Reverse geocoding failed",
                extra={"lat": coordinate.lat, "lng": coordinate.lng, "error": str(e)},
            )
            found = None

        if revision != self._revision:
            self._logger.debug(
                "Dropping stale reverse geocoding result",
                extra={"revision": revision, "current": self._revision},
            )
            return None

        if found is None:
            return self.set_from_map(coordinate)
        return self.set_from_map(found.coordinate, found.label())

    def load_stored(self, text: Optional[str], coordinate: Optional[Coordinate]) -> None:
        """Seed the field from a stored record when editing starts."""
        self._supersede()
        self._adopted_text = None
        self.state = ResolverState(text=text or "")
        if coordinate is not None:
            self.state.location = Location(
                coordinate=coordinate,
                display_name=text or coordinate.label(),
                source_kind=SourceKind.STORED,
            )

    def reset(self) -> None:
        """Discard all field state on commit or cancel."""
        self._supersede()
        self._adopted_text = None
        self.state = ResolverState()
