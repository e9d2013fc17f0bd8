"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.

- Geocoding: address search and reverse lookup
- Record store: carpool and registration reads/writes
- Rendering: the map surface
- Cache: geocoding result cache
"""

from .cache import CachePort
from .geocoding import GeocoderPort
from .rendering import MapRendererPort
from .store import RecordStorePort

__all__ = [
    "GeocoderPort",
    "RecordStorePort",
    "MapRendererPort",
    "CachePort",
]
