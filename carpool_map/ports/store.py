"""Record store port - Read/write contract for carpools and registrations.

The store owns carpool and registration records. The map only reads
them and writes back location fields through the two update methods.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Protocol, Sequence


class RecordStorePort(Protocol):
    """Port for the persistent record store.

    Implementations:
    - adapters/store/memory_store.py (InMemoryRecordStore)
    - adapters/store/json_store.py (JsonFileRecordStore)

    Records are plain mappings using the stored field names
    (``departure_lat``, ``carpool_return_lng``, ...). Updates raise
    PersistenceError (or RecordNotFoundError) on failure.
    """

    async def list_carpools(self, event_id: str) -> Sequence[Mapping[str, Any]]:
        """Return the event's carpool rows in display order."""
        ...

    async def list_registrations(self, event_id: str) -> Sequence[Mapping[str, Any]]:
        """Return the event's registration rows."""
        ...

    async def get_event(self, event_id: str) -> Mapping[str, Any]:
        """Return the event row (venue name and coordinates)."""
        ...

    async def list_members(self, event_id: str) -> Sequence[Mapping[str, Any]]:
        """Return the team roster for the event's team."""
        ...

    async def update_carpool(
        self, carpool_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Apply field updates to a carpool and return the stored row."""
        ...

    async def update_registration(
        self, registration_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Apply field updates to a registration and return the stored row."""
        ...
