"""Location write-back service.

Persists resolved coordinates for carpools and rider registrations. Update
payloads are validated pydantic models that serialise to the stored field
names. Only one save per record may be in flight at a time.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.errors import PersistenceError, SaveInProgressError
from ..domain.models import Direction, Location
from ..ports.store import RecordStorePort

Latitude = Optional[Annotated[float, Field(ge=-90.0, le=90.0)]]
Longitude = Optional[Annotated[float, Field(ge=-180.0, le=180.0)]]


def _check_pair(model: BaseModel, lat_field: str, lng_field: str) -> None:
    lat = getattr(model, lat_field)
    lng = getattr(model, lng_field)
    if (lat is None) != (lng is None):
        raise ValueError(f"{lat_field} and {lng_field} must be set together")


class CarpoolUpdate(BaseModel):
    """Location fields of a carpool record.

    Only fields that were explicitly set are written. Setting a link to
    None clears it, which is what happens when coordinates came from a
    search rather than a pasted link.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    departure_location: Optional[str] = None
    departure_lat: Latitude = None
    departure_lng: Longitude = None
    departure_location_link: Optional[str] = None
    final_location: Optional[str] = None
    final_lat: Latitude = None
    final_lng: Longitude = None
    final_location_link: Optional[str] = None
    carpool_direction: Optional[Direction] = None

    @model_validator(mode="after")
    def check_pairs(self) -> CarpoolUpdate:
        _check_pair(self, "departure_lat", "departure_lng")
        _check_pair(self, "final_lat", "final_lng")
        return self

    @classmethod
    def from_locations(
        cls,
        departure: Optional[Location] = None,
        departure_text: str = "",
        return_location: Optional[Location] = None,
        return_text: str = "",
    ) -> CarpoolUpdate:
        """Build an update from the resolved departure and return fields.

        A field's link is stored only when its coordinates came from a link.
        Text is written whenever it is non-empty.
        """
        values: Dict[str, Any] = {}
        if departure is not None:
            values["departure_location_link"] = departure_text if departure.from_link else None
            values["departure_lat"] = departure.lat
            values["departure_lng"] = departure.lng
        if return_location is not None:
            values["final_location_link"] = return_text if return_location.from_link else None
            values["final_lat"] = return_location.lat
            values["final_lng"] = return_location.lng
        if departure_text:
            values["departure_location"] = departure_text
        if return_text:
            values["final_location"] = return_text
        return cls(**values)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class RiderLocationUpdate(BaseModel):
    """Pickup/drop-off fields of a rider registration.

    Every location field is always written (None clears it), matching how
    the rider edit form saves the whole location block at once.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    carpool_departure_location: Optional[str] = None
    carpool_departure_lat: Latitude = None
    carpool_departure_lng: Longitude = None
    carpool_return_location: Optional[str] = None
    carpool_return_lat: Latitude = None
    carpool_return_lng: Longitude = None
    carpool_direction: Direction = Direction.BOTH
    carpool_return_same_as_departure: Optional[bool] = None

    @model_validator(mode="after")
    def check_pairs(self) -> RiderLocationUpdate:
        _check_pair(self, "carpool_departure_lat", "carpool_departure_lng")
        _check_pair(self, "carpool_return_lat", "carpool_return_lng")
        return self

    @classmethod
    def from_locations(
        cls,
        pickup: Optional[Location] = None,
        dropoff: Optional[Location] = None,
        direction: Direction = Direction.BOTH,
        same_location: Optional[bool] = None,
    ) -> RiderLocationUpdate:
        values: Dict[str, Any] = {"carpool_direction": direction}
        if pickup is not None:
            values.update(
                carpool_departure_location=pickup.display_name,
                carpool_departure_lat=pickup.lat,
                carpool_departure_lng=pickup.lng,
            )
        if dropoff is not None:
            values.update(
                carpool_return_location=dropoff.display_name,
                carpool_return_lat=dropoff.lat,
                carpool_return_lng=dropoff.lng,
            )
        if same_location is not None:
            values["carpool_return_same_as_departure"] = same_location
        return cls(**values)

    def to_record(self) -> Dict[str, Any]:
        record = self.model_dump(mode="json")
        if self.carpool_return_same_as_departure is None:
            record.pop("carpool_return_same_as_departure")
        return record


@dataclass
class LocationWriter:
    """Writes resolved locations back to the record store.

    A second save for a record whose save is still in flight raises
    SaveInProgressError immediately; saves for different records run
    independently. Failures surface as PersistenceError and are never
    retried.

    Attributes:
        store: Record store to write to
        on_saved: Called with ``(entity, entity_id)`` after each successful
            save, so views built from the store can refresh
    """

    store: RecordStorePort
    on_saved: List[Callable[[str, str], None]] = field(default_factory=list)

    _locks: Dict[Tuple[str, str], asyncio.Lock] = field(
        init=False, default_factory=dict, repr=False
    )
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def is_saving(self, entity: str, entity_id: str) -> bool:
        lock = self._locks.get((entity, entity_id))
        return lock is not None and lock.locked()

    async def _guarded(
        self, entity: str, entity_id: str, write, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        key = (entity, entity_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        if lock.locked():
            raise SaveInProgressError(
                f"A save for {entity} {entity_id} is already in progress",
                entity=entity,
                entity_id=entity_id,
            )

        async with lock:
            self._logger.info(
                "Saving location",
                extra={"entity": entity, "entity_id": entity_id, "fields": sorted(updates)},
            )
            try:
                row = await write(entity_id, updates)
            except PersistenceError:
                self._logger.warning(
                    "Location save failed",
                    extra={"entity": entity, "entity_id": entity_id},
                )
                raise
            except Exception as e:
                self._logger.warning(
                    "Location save failed",
                    extra={"entity": entity, "entity_id": entity_id, "error": str(e)},
                )
                raise PersistenceError(
                    f"Could not save {entity} {entity_id}",
                    cause=e,
                    entity=entity,
                    entity_id=entity_id,
                ) from e

        for listener in self.on_saved:
            listener(entity, entity_id)
        return dict(row)

    async def save_carpool_coordinates(
        self, carpool_id: str, updates: CarpoolUpdate
    ) -> Dict[str, Any]:
        """Persist a carpool's departure/return location fields.

        Raises:
            SaveInProgressError: A save for this carpool is still running.
            PersistenceError: The store rejected the write.
        """
        return await self._guarded(
            "carpool", carpool_id, self.store.update_carpool, updates.to_record()
        )

    async def save_rider_location(
        self, registration_id: str, updates: RiderLocationUpdate
    ) -> Dict[str, Any]:
        """Persist a rider's pickup/drop-off fields.

        Raises:
            SaveInProgressError: A save for this registration is still running.
            PersistenceError: The store rejected the write.
        """
        return await self._guarded(
            "registration",
            registration_id,
            self.store.update_registration,
            updates.to_record(),
        )
