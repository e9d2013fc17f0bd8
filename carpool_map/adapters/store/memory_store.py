"""In-memory record store.

Holds event, carpool, registration and roster rows as plain dicts,
keyed by id, and implements RecordStorePort. Rows handed out are copies
so callers can never mutate stored state behind the store's back.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from ...domain.errors import PersistenceError, RecordNotFoundError


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class InMemoryRecordStore:
    """Record store backed by dictionaries.

    Attributes:
        events: Event rows by id
        carpools: Carpool rows by id (insertion order is display order)
        registrations: Registration rows by id
        members: Team member rows by id
    """

    events: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    carpools: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    registrations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    members: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load_snapshot(self, snapshot: Mapping[str, Any]) -> str:
        """Load one event and its related rows.

        Expected keys: ``event`` (with ``id``), ``carpools``,
        ``registrations`` and optionally ``members``.

        Returns:
            The event id.

        Raises:
            PersistenceError: If the snapshot has no event id.
        """
        event = dict(snapshot.get("event") or {})
        if "id" not in event:
            raise PersistenceError("Snapshot has no event id", entity="event")
        event_id = str(event["id"])
        self.events[event_id] = event

        for row in snapshot.get("carpools") or ():
            row = dict(row)
            row.setdefault("event_id", event_id)
            self.carpools[str(row["id"])] = row
        for row in snapshot.get("registrations") or ():
            row = dict(row)
            row.setdefault("event_id", event_id)
            self.registrations[str(row["id"])] = row
        for row in snapshot.get("members") or ():
            row = dict(row)
            row.setdefault("event_id", event_id)
            self.members[str(row["id"])] = row

        self._logger.info(
            "Snapshot loaded",
            extra={
                "event_id": event_id,
                "carpools": len(snapshot.get("carpools") or ()),
                "registrations": len(snapshot.get("registrations") or ()),
            },
        )
        return event_id

    def snapshot(self, event_id: str) -> Dict[str, Any]:
        """Inverse of load_snapshot for a single event."""
        return {
            "event": copy.deepcopy(self.events.get(event_id, {"id": event_id})),
            "carpools": self._rows_for(self.carpools, event_id),
            "registrations": self._rows_for(self.registrations, event_id),
            "members": self._rows_for(self.members, event_id),
        }

    @staticmethod
    def _rows_for(
        table: Mapping[str, Mapping[str, Any]], event_id: str
    ) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(dict(row))
            for row in table.values()
            if str(row.get("event_id")) == event_id
        ]

    async def get_event(self, event_id: str) -> Dict[str, Any]:
        event = self.events.get(event_id)
        if event is None:
            raise RecordNotFoundError(
                f"Event not found: {event_id}", entity="event", entity_id=event_id
            )
        return copy.deepcopy(event)

    async def list_carpools(self, event_id: str) -> List[Dict[str, Any]]:
        return self._rows_for(self.carpools, event_id)

    async def list_registrations(self, event_id: str) -> List[Dict[str, Any]]:
        return self._rows_for(self.registrations, event_id)

    async def list_members(self, event_id: str) -> List[Dict[str, Any]]:
        return self._rows_for(self.members, event_id)

    def _apply(
        self,
        table: Dict[str, Dict[str, Any]],
        entity: str,
        entity_id: str,
        updates: Mapping[str, Any],
    ) -> Dict[str, Any]:
        row = table.get(entity_id)
        if row is None:
            raise RecordNotFoundError(
                f"{entity.capitalize()} not found: {entity_id}",
                entity=entity,
                entity_id=entity_id,
            )
        row.update(updates)
        row["updated_at"] = _utc_now()
        self._logger.debug(
            "Record updated",
            extra={"entity": entity, "entity_id": entity_id, "fields": sorted(updates)},
        )
        return copy.deepcopy(row)

    async def update_carpool(
        self, carpool_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        return self._apply(self.carpools, "carpool", carpool_id, updates)

    async def update_registration(
        self, registration_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        return self._apply(self.registrations, "registration", registration_id, updates)

    def find_event_for(self, record_id: str) -> Optional[str]:
        """Event id owning a carpool or registration, if known."""
        row = self.carpools.get(record_id) or self.registrations.get(record_id)
        return None if row is None else str(row.get("event_id"))
