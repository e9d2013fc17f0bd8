"""Tests for check-in proximity validation."""

from carpool_map.config import CheckInConfig
from carpool_map.domain.models import CheckInStatus, Coordinate
from carpool_map.services.checkin import CheckInService

VENUE = Coordinate(43.0, -79.0)
# 0.0054 degrees of latitude is about 600 m
NEARBY_600M = Coordinate(43.0054, -79.0)


def test_far_check_in_is_flagged():
    service = CheckInService(CheckInConfig(radius_meters=500))
    result = service.check_in(NEARBY_600M, VENUE)
    assert result.status is CheckInStatus.TOO_FAR
    assert result.distance_m == 600
    assert not result.within_radius
    assert result.label == "600m from venue"


def test_within_radius():
    service = CheckInService(CheckInConfig(radius_meters=500))
    result = service.check_in(NEARBY_600M, VENUE, radius_m=1000)
    assert result.status is CheckInStatus.OK
    assert result.within_radius
    assert result.label is None


def test_no_venue():
    result = CheckInService(CheckInConfig()).check_in(NEARBY_600M, None)
    assert result.status is CheckInStatus.NO_VENUE
    assert result.distance_m is None


def test_describe_kilometres():
    service = CheckInService(CheckInConfig(radius_meters=500))
    result = service.check_in(Coordinate(43.0135, -79.0), VENUE)
    assert CheckInService.describe_check_in(result) == "1.5km from venue"
