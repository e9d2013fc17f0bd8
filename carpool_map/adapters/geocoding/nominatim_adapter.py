"""Nominatim geocoder adapter.

Address search and reverse lookup against OpenStreetMap Nominatim via
geopy, with:
- Result caching via CachePort
- Configuration injection
- Rate limiting (Nominatim's usage policy allows ~1 request/second)
- Failures logged and converted to "no candidates"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from geopy.exc import GeocoderRateLimited, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import Coordinate, GeocodeCandidate
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache


def short_name(address: Mapping[str, Any]) -> str:
    """Compact "road, city, state" label from Nominatim address details."""
    parts = [
        address.get("road") or address.get("neighbourhood"),
        address.get("city") or address.get("town") or address.get("village"),
        address.get("state"),
    ]
    return ", ".join(str(p) for p in parts if p)


def candidate_from_raw(raw: Mapping[str, Any]) -> Optional[GeocodeCandidate]:
    """Convert one Nominatim JSON hit into a candidate.

    Hits with missing or out-of-range coordinates are dropped.
    """
    coordinate = Coordinate.parse(raw.get("lat"), raw.get("lon"))
    if coordinate is None:
        return None
    address = raw.get("address") or {}
    display_name = str(raw.get("display_name") or coordinate.label())
    return GeocodeCandidate(
        display_name=display_name,
        lat=coordinate.lat,
        lng=coordinate.lng,
        short_name=short_name(address),
        address_detail={str(k): str(v) for k, v in address.items()},
        place_type=raw.get("type"),
    )


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter with caching and rate limiting.

    This adapter implements GeocoderPort.

    Attributes:
        config: Geocoding configuration
        cache: Cache for search results
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: Optional[CachePort[List[GeocodeCandidate]]] = None

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _search_fn: Optional[Any] = field(default=None, repr=False)
    _reverse_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.cache is None:
            self.cache = InMemoryCache(
                name="geocode",
                ttl_seconds=self.config.cache_ttl_seconds,
                max_size=self.config.cache_max_size,
            )

    def _get_geolocator(self) -> Nominatim:
        """Get or initialize the geolocator and its rate-limited calls."""
        if self._geolocator is not None:
            return self._geolocator

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "domain": self.config.domain,
                "timeout": self.config.timeout_seconds,
            },
        )

        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            domain=self.config.domain,
            timeout=self.config.timeout_seconds,
        )
        limiter_options = dict(
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,  # We log and convert failures ourselves
        )
        self._search_fn = RateLimiter(self._geolocator.geocode, **limiter_options)
        self._reverse_fn = RateLimiter(self._geolocator.reverse, **limiter_options)
        return self._geolocator

    def _query(self, query: str, limit: int) -> List[GeocodeCandidate]:
        self._get_geolocator()
        try:
            results = self._search_fn(  # type: ignore[misc]
                query,
                exactly_one=False,
                limit=limit,
                addressdetails=True,
                language=self.config.language,
            )
        except GeocoderRateLimited as e:
            raise GeocodingError(
                "Geocoding rate limited", query=query, is_rate_limited=True, cause=e
            )
        except GeopyError as e:
            raise GeocodingError("Geocoding request failed", query=query, cause=e)

        candidates = []
        for location in results or ():
            candidate = candidate_from_raw(location.raw)
            if candidate is not None:
                candidates.append(candidate)
        return candidates[:limit]

    def search(self, query: str, limit: int = 5) -> List[GeocodeCandidate]:
        """Search for places matching ``query``.

        Args:
            query: Free-text address.
            limit: Maximum number of candidates.

        Returns:
            Candidates, best first; empty on any failure.
        """
        if not query or not query.strip():
            return []

        limit = min(limit, self.config.result_limit)
        cache_key = f"{query.strip().lower()}:{limit}:{self.config.language}"
        cache = self.cache
        if cache is not None and cache_key in cache:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return list(cache.get(cache_key) or [])

        try:
            candidates = self._query(query.strip(), limit)
        except GeocodingError as e:
            self._logger.warning(
                "Geocode service error",
                extra={
                    "query": query,
                    "rate_limited": e.is_rate_limited,
                    "error": str(e),
                },
            )
            return []
        except Exception as e:
            self._logger.error(
                "Geocode unexpected error",
                extra={"query": query, "error": str(e)},
            )
            return []

        self._logger.debug(
            "Geocode success",
            extra={"query": query, "candidates": len(candidates)},
        )
        if cache is not None:
            cache.set(cache_key, candidates)
        return list(candidates)

    def reverse(self, coordinate: Coordinate) -> Optional[GeocodeCandidate]:
        """Reverse geocode a coordinate to an address.

        Args:
            coordinate: Point to look up.

        Returns:
            Candidate for the address at that point, or None if not found.
        """
        self._get_geolocator()
        try:
            result = self._reverse_fn(  # type: ignore[misc]
                coordinate.as_pair(),
                exactly_one=True,
                addressdetails=True,
                language=self.config.language,
            )
        except GeopyError as e:
            self._logger.warning(
                "Reverse geocode failed",
                extra={"lat": coordinate.lat, "lng": coordinate.lng, "error": str(e)},
            )
            return None
        except Exception as e:
            self._logger.error(
                "Reverse geocode unexpected error",
                extra={"lat": coordinate.lat, "lng": coordinate.lng, "error": str(e)},
            )
            return None

        if result is None:
            return None
        return candidate_from_raw(result.raw)
