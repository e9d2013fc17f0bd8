"""Record store adapters - Implementations of RecordStorePort.

Available implementations:
- InMemoryRecordStore: dict-backed store
- JsonFileRecordStore: snapshot file on disk
"""

from .json_store import JsonFileRecordStore
from .memory_store import InMemoryRecordStore

__all__ = ["InMemoryRecordStore", "JsonFileRecordStore"]
