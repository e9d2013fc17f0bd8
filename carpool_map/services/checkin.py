"""Check-in proximity validation.

A self check-in may carry the device position. It is compared against the
venue: check-ins outside the radius are still accepted but flagged, and
admin views annotate them as far from the venue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from ..config import CheckInConfig, get_config
from ..domain.models import CheckInResult, CheckInStatus, Coordinate
from ..geo.distance import format_distance, haversine_m


@dataclass
class CheckInService:
    """Validates self-reported check-in positions against a venue.

    Attributes:
        config: Check-in configuration (default radius)
    """

    config: CheckInConfig = field(default_factory=lambda: get_config().checkin)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def check_in(
        self,
        position: Coordinate,
        venue: Optional[Coordinate],
        radius_m: Optional[float] = None,
    ) -> CheckInResult:
        """Compare a check-in position with the venue.

        Args:
            position: Where the member says they are.
            venue: Venue coordinate; None when the event has no location.
            radius_m: Override for the configured radius.

        Returns:
            CheckInResult with the rounded distance in meters.
        """
        if venue is None:
            return CheckInResult(status=CheckInStatus.NO_VENUE)

        radius = radius_m if radius_m is not None else self.config.radius_meters
        distance = round(haversine_m(position, venue))
        status = CheckInStatus.OK if distance <= radius else CheckInStatus.TOO_FAR

        if status is CheckInStatus.TOO_FAR:
            self._logger.info(
                "Check-in outside venue radius",
                extra={"distance_m": distance, "radius_m": radius},
            )
        result = CheckInResult(status=status, distance_m=distance, radius_m=radius)
        return replace(result, label=self.describe_check_in(result))

    @staticmethod
    def describe_check_in(result: CheckInResult) -> Optional[str]:
        """Admin-facing annotation, e.g. ``"1.2km from venue"``.

        Only check-ins outside the radius get one.
        """
        if result.status is not CheckInStatus.TOO_FAR or result.distance_m is None:
            return None
        return f"{format_distance(result.distance_m)} from venue"
