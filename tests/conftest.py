"""Shared fixtures for the carpool map tests."""

from __future__ import annotations

import copy
import logging
from unittest.mock import MagicMock

import pytest

from carpool_map.config import reset_config
from carpool_map.container import reset_container
from carpool_map.domain.models import GeocodeCandidate

VENUE = {"lat": 43.6426, "lng": -79.3871}

SNAPSHOT = {
    "event": {
        "id": "evt-1",
        "title": "Regatta",
        "venue": "Harbourfront",
        "venue_lat": VENUE["lat"],
        "venue_lng": VENUE["lng"],
    },
    "carpools": [
        {
            "id": "cp-1",
            "driver_id": "u-driver-1",
            "driver": {"full_name": "Dana Driver"},
            "total_seats": 3,
            "passengers": [{"passenger_id": "u-rider-2"}],
            "departure_location": "Union Station",
            "departure_lat": 43.6453,
            "departure_lng": -79.3806,
            "final_location": "Yorkdale",
            "final_lat": 43.7255,
            "final_lng": -79.4522,
            "carpool_direction": "both",
        },
        {
            "id": "cp-2",
            "driver_id": "u-driver-2",
            "total_seats": 2,
            "passengers": [],
            "departure_location": "Pasted link",
            "departure_location_link": "https://www.google.com/maps/place/High+Park/@43.6465,-79.4637,15z",
            "carpool_direction": "to",
        },
        {
            "id": "cp-3",
            "driver_id": "u-driver-3",
            "total_seats": 4,
            "departure_location": "Somewhere vague",
            "carpool_direction": "from",
        },
    ],
    "registrations": [
        {
            "id": "reg-1",
            "user_id": "u-rider-1",
            "profile": {"full_name": "Riley Rider"},
            "carpool_needs": "need_ride",
            "carpool_direction": "both",
            "carpool_departure_location": "Dundas West",
            "carpool_departure_lat": 43.6566,
            "carpool_departure_lng": -79.4530,
            "carpool_return_location": "Bloor",
            "carpool_return_lat": 43.6700,
            "carpool_return_lng": -79.3900,
        },
        {
            "id": "reg-2",
            "user_id": "u-rider-2",
            "profile": {"full_name": "Pat Passenger"},
            "carpool_needs": "need_ride",
            "carpool_departure_lat": 43.70,
            "carpool_departure_lng": -79.40,
        },
        {
            "id": "reg-3",
            "user_id": "u-rider-3",
            "profile": {"full_name": "Sam Same"},
            "carpool_needs": "need_ride",
            "carpool_direction": "both",
            "carpool_departure_location": "Leslieville",
            "carpool_departure_lat": 43.6630,
            "carpool_departure_lng": -79.3300,
            "carpool_return_same_as_departure": True,
        },
    ],
    "members": [
        {"id": "u-rider-1", "full_name": "Riley Rider"},
        {"id": "u-rider-4", "full_name": "Nora Newcomer"},
        {"id": "u-old", "full_name": "Ina Active", "is_active": False},
    ],
}


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test sees config built from the current environment."""
    reset_config()
    reset_container()
    yield
    reset_config()
    reset_container()
    logger = logging.getLogger("carpool_map")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def snapshot():
    return copy.deepcopy(SNAPSHOT)


@pytest.fixture
def memory_store(snapshot):
    from carpool_map.adapters.store import InMemoryRecordStore

    store = InMemoryRecordStore()
    store.load_snapshot(snapshot)
    return store


@pytest.fixture
def candidates():
    return [
        GeocodeCandidate(
            display_name="Union Station, 65, Front Street West, Toronto, Ontario, Canada",
            lat=43.6453,
            lng=-79.3806,
            short_name="Front Street West, Toronto, Ontario",
        ),
        GeocodeCandidate(
            display_name="Union, Ontario, Canada",
            lat=42.9,
            lng=-81.1,
        ),
    ]


@pytest.fixture
def fake_geocoder(candidates):
    """GeocoderPort stand-in returning the fixed candidates."""
    geocoder = MagicMock()
    geocoder.search.return_value = candidates
    geocoder.reverse.return_value = None
    return geocoder
