"""Thread-safe in-memory LRU cache with optional TTL.

The geocoder adapter runs its blocking HTTP calls in worker threads, so
the cache guards its store with a lock. A cached ``None`` is a real
entry (a remembered miss) and is reported by ``in``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

_NEVER = float("inf")


@dataclass
class InMemoryCache(Generic[T]):
    """LRU cache implementing CachePort.

    Attributes:
        ttl_seconds: Entry lifetime (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging

    Example:
        cache = InMemoryCache[list](name="geocode", ttl_seconds=3600)
        cache.set("union station", candidates)
    """

    ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"

    _entries: "OrderedDict[str, Tuple[Any, float]]" = field(
        default_factory=OrderedDict, repr=False
    )
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    def _live(self, key: str) -> Optional[Tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.monotonic() > entry[1]:
            del self._entries[key]
            self._logger.debug("Cache entry expired", extra={"key": key})
            return None
        self._entries.move_to_end(key)
        return entry

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return entry[0]

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def set(self, key: str, value: T) -> None:
        with self._lock:
            expiry = (
                time.monotonic() + self.ttl_seconds
                if self.ttl_seconds is not None
                else _NEVER
            )
            self._entries[key] = (value, expiry)
            self._entries.move_to_end(key)
            if self.max_size is not None:
                while len(self._entries) > self.max_size:
                    evicted, _ = self._entries.popitem(last=False)
                    self._logger.debug(
                        "Cache evicted entry",
                        extra={"key": evicted, "reason": "max_size"},
                    )

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Hit/miss counters and current size."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(self._hits / total * 100, 1) if total else 0.0,
            }
