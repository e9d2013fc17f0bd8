"""Typed domain errors for the carpool map.

Only persistence and rendering failures ever reach callers; parsing and
geocoding failures degrade to "no data" inside the components that hit
them and are logged there.

All errors inherit from CarpoolMapError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CarpoolMapError(Exception):
    """Base error for the carpool map domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class GeocodingError(CarpoolMapError):
    """The geocoding service could not answer a query.

    Raised inside the geocoder adapter only; the adapter converts it to an
    empty candidate list before returning.

    Attributes:
        query: The query that failed
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    is_rate_limited: bool = False


@dataclass
class PersistenceError(CarpoolMapError):
    """A write to the record store failed.

    The caller keeps its local edit state and re-enables its save control.

    Attributes:
        entity: Kind of record ("carpool" or "registration")
        entity_id: Identifier of the record
    """

    entity: str = ""
    entity_id: str = ""


@dataclass
class SaveInProgressError(PersistenceError):
    """A save for the same record is already in flight."""


@dataclass
class RecordNotFoundError(PersistenceError):
    """The record to update does not exist in the store."""


@dataclass
class RenderingError(CarpoolMapError):
    """Map rendering failed.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of renderer that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""


@dataclass
class ConfigurationError(CarpoolMapError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
