"""Services layer - Application orchestration.

Pure aggregation lives in module-level functions; stateful services are
dataclasses wired by the container.

Available services:
- MapViewService: Computes and renders an event's carpool map
- LocationResolver: Resolves one location field (link, search, map pick)
- LocationWriter: Persists resolved locations with per-record save guards
- CheckInService: Check-in proximity validation
"""

from .bounds import collect_points, fit_request, map_center
from .carpool_aggregator import aggregate_carpools, carpool_markers, filter_by_direction
from .checkin import CheckInService
from .location_resolver import LocationResolver, ResolverState
from .location_writer import CarpoolUpdate, LocationWriter, RiderLocationUpdate
from .map_view import EventData, MapView, MapViewService, ViewState
from .rider_aggregator import aggregate_riders, rider_markers, unregistered_members

__all__ = [
    "MapViewService",
    "MapView",
    "EventData",
    "ViewState",
    "LocationResolver",
    "ResolverState",
    "LocationWriter",
    "CarpoolUpdate",
    "RiderLocationUpdate",
    "CheckInService",
    "aggregate_carpools",
    "carpool_markers",
    "filter_by_direction",
    "aggregate_riders",
    "rider_markers",
    "unregistered_members",
    "collect_points",
    "fit_request",
    "map_center",
]
