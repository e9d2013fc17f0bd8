"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    CarpoolMapError,
    ConfigurationError,
    GeocodingError,
    PersistenceError,
    RecordNotFoundError,
    RenderingError,
    SaveInProgressError,
)
from .models import (
    NEED_RIDE,
    Carpool,
    CarpoolView,
    CheckInResult,
    CheckInStatus,
    Coordinate,
    Direction,
    FitRequest,
    GeocodeCandidate,
    LinkParseResult,
    Location,
    MapBounds,
    MapConnector,
    MapMarker,
    MapScene,
    MarkerKind,
    MarkerStyle,
    RiderRegistration,
    RiderRequest,
    SourceKind,
    TeamMember,
    ViewDirection,
    popup_html,
)

__all__ = [
    # Models
    "NEED_RIDE",
    "Coordinate",
    "Location",
    "SourceKind",
    "Direction",
    "ViewDirection",
    "LinkParseResult",
    "GeocodeCandidate",
    "Carpool",
    "CarpoolView",
    "RiderRegistration",
    "RiderRequest",
    "TeamMember",
    "MarkerKind",
    "MarkerStyle",
    "MapMarker",
    "MapConnector",
    "popup_html",
    "MapBounds",
    "FitRequest",
    "MapScene",
    "CheckInStatus",
    "CheckInResult",
    # Errors
    "CarpoolMapError",
    "GeocodingError",
    "PersistenceError",
    "SaveInProgressError",
    "RecordNotFoundError",
    "RenderingError",
    "ConfigurationError",
]
