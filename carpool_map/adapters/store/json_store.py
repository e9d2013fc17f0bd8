"""JSON file record store.

Reads an event snapshot from a JSON file and writes it back after every
successful update. The file is the only durable state; if the write
fails the in-memory row is rolled back so memory and disk agree.
"""

from __future__ import annotations

import asyncio
import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ...config import StoreConfig, get_config
from ...domain.errors import ConfigurationError, PersistenceError
from .memory_store import InMemoryRecordStore


@dataclass
class JsonFileRecordStore(InMemoryRecordStore):
    """Record store persisted to a single JSON snapshot file.

    Attributes:
        path: Snapshot file location
    """

    path: Optional[Path] = None
    _event_id: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: Optional[StoreConfig] = None) -> JsonFileRecordStore:
        config = config or get_config().store
        if config.data_path is None:
            raise ConfigurationError(
                "JSON store needs a data path",
                setting_name="CPM_STORE_DATA_PATH",
                expected_type="path to a snapshot .json file",
            )
        store = cls(path=config.data_path)
        store.load()
        return store

    def load(self) -> str:
        """Read the snapshot file into memory.

        Raises:
            PersistenceError: If the file cannot be read or parsed.
        """
        if self.path is None:
            raise PersistenceError("No snapshot path configured", entity="event")
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(
                f"Failed to read snapshot {self.path}", entity="event", cause=e
            )
        self._event_id = self.load_snapshot(data)
        return self._event_id

    def _write(self, path: Path, event_id: str) -> None:
        payload = self.snapshot(event_id)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)
        tmp_path.replace(path)

    async def _persist(
        self,
        table: Dict[str, Dict[str, Any]],
        entity: str,
        entity_id: str,
        updates: Mapping[str, Any],
    ) -> Dict[str, Any]:
        path, event_id = self.path, self._event_id
        if path is None or event_id is None:
            raise PersistenceError(
                "No snapshot loaded", entity=entity, entity_id=entity_id
            )
        previous = copy.deepcopy(table.get(entity_id))
        row = self._apply(table, entity, entity_id, updates)
        try:
            await asyncio.to_thread(self._write, path, event_id)
        except OSError as e:
            if previous is not None:
                table[entity_id] = previous
            self._logger.error(
                "Snapshot write failed",
                extra={"entity": entity, "entity_id": entity_id, "error": str(e)},
            )
            raise PersistenceError(
                f"Could not save {entity} {entity_id}",
                entity=entity,
                entity_id=entity_id,
                cause=e,
            )
        return row

    async def update_carpool(
        self, carpool_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        return await self._persist(self.carpools, "carpool", carpool_id, updates)

    async def update_registration(
        self, registration_id: str, updates: Mapping[str, Any]
    ) -> Dict[str, Any]:
        return await self._persist(
            self.registrations, "registration", registration_id, updates
        )
