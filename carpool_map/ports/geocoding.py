"""Geocoding port - Abstraction for address search.

This protocol defines the contract for geocoding services, allowing
different implementations (Nominatim, a hosted provider, test fakes)
to be used by the location resolver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Coordinate, GeocodeCandidate


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py

    Implementations must never raise: a failed or empty response is
    reported as an empty sequence (or None for reverse lookups).
    """

    def search(self, query: str, limit: int = 5) -> Sequence[GeocodeCandidate]:
        """Search for places matching free text.

        Args:
            query: Address or place text typed by the user.
            limit: Maximum number of candidates to return.

        Returns:
            Up to ``limit`` candidates, best first. Empty on failure.
        """
        ...

    def reverse(self, coordinate: Coordinate) -> Optional[GeocodeCandidate]:
        """Look up the address at a coordinate.

        Args:
            coordinate: Point picked on the map or reported by a device.

        Returns:
            The nearest address, or None if unavailable.
        """
        ...
