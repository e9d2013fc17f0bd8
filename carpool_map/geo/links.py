"""Mapping-service link parsing.

Drivers and riders often paste a Google Maps link instead of typing an
address. This module pulls a place name and coordinates out of such a
link. Supported shapes:

- ``https://www.google.com/maps/place/Place+Name/@40.7128,-74.0060,17z/...``
- ``https://www.google.com/maps/@40.7128,-74.0060,15z``
- ``https://maps.google.com/?q=40.7128,-74.0060``
- ``https://www.google.com/maps/place/...!3d40.7128!4d-74.0060``
- ``https://maps.app.goo.gl/...`` and ``https://goo.gl/maps/...``
  (shortened, recognised but carry no coordinates)

Parsing never raises; anything ambiguous resolves to "no coordinates".
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Tuple
from urllib.parse import unquote

from ..domain.models import Coordinate, LinkParseResult, is_valid_lat_lng

logger = logging.getLogger(__name__)

_MAPS_HOST = re.compile(
    r"google\.(com|[a-z]{2})/maps|maps\.google\.|maps\.app\.goo\.gl|goo\.gl/maps",
    re.IGNORECASE,
)
_PLACE = re.compile(r"/place/([^/@]+)", re.IGNORECASE)

_NUMBER = r"(-?\d+(?:\.\d+)?)"

# Tried in order; the first in-range capture wins.
COORDINATE_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("at", re.compile(rf"@{_NUMBER},{_NUMBER}")),
    ("query", re.compile(rf"[?&]q={_NUMBER},{_NUMBER}")),
    ("data", re.compile(rf"!3d{_NUMBER}!4d{_NUMBER}")),
)

NOT_A_LINK = LinkParseResult()

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={lat},{lng}"


def is_maps_link(text: Any) -> bool:
    """Return True if ``text`` looks like a mapping-service URL."""
    return isinstance(text, str) and bool(_MAPS_HOST.search(text.strip()))


def _place_name(url: str) -> Optional[str]:
    match = _PLACE.search(url)
    if not match:
        return None
    name = unquote(match.group(1).replace("+", " ")).strip()
    return name or None


def _coordinates(url: str) -> Optional[Tuple[float, float]]:
    for pattern_name, pattern in COORDINATE_PATTERNS:
        match = pattern.search(url)
        if not match:
            continue
        lat, lng = float(match.group(1)), float(match.group(2))
        if is_valid_lat_lng(lat, lng):
            return lat, lng
        logger.debug(
            "Discarding out-of-range link coordinates",
            extra={"pattern": pattern_name, "lat": lat, "lng": lng},
        )
    return None


def parse_maps_link(text: Any) -> LinkParseResult:
    """Extract a place name and coordinates from a mapping-service link.

    Args:
        text: Arbitrary user input.

    Returns:
        LinkParseResult. ``is_valid_link`` is True for any recognised
        mapping-service URL, even when no coordinates could be found.
    """
    if not is_maps_link(text):
        return NOT_A_LINK

    url = text.strip()
    name: Optional[str] = None
    coords: Optional[Tuple[float, float]] = None
    try:
        name = _place_name(url)
        coords = _coordinates(url)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(
            "Could not parse maps link",
            extra={"url": url[:200], "error": str(e)},
        )

    if coords is None:
        return LinkParseResult(name=name, is_valid_link=True, has_coordinates=False)

    return LinkParseResult(
        name=name,
        lat=coords[0],
        lng=coords[1],
        is_valid_link=True,
        has_coordinates=True,
    )


def format_location_display(
    name: Optional[str], link: Optional[str]
) -> Tuple[Optional[str], bool]:
    """Pick the label for a location that may have a name, a link, or both.

    Returns:
        ``(display_name, has_link)``.
    """
    if name:
        return name, bool(link)
    if link:
        parsed = parse_maps_link(link)
        return parsed.name or "View on Maps", True
    return None, False


def maps_search_url(coordinate: Coordinate) -> str:
    """Link that opens the coordinate in Google Maps."""
    return MAPS_SEARCH_URL.format(lat=coordinate.lat, lng=coordinate.lng)
