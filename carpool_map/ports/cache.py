"""Cache port - Injectable caching abstraction.

Geocoding lookups are cached so that retyping the same address, or
re-opening an editor on a known place, does not hit the rate-limited
search service again.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementation: adapters/cache/memory_cache.py (InMemoryCache)
    """

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        ...

    def set(self, key: str, value: T) -> None:
        """Store a value under ``key``."""
        ...

    def __contains__(self, key: str) -> bool:
        """Whether ``key`` holds a live entry (a cached None counts)."""
        ...

    def clear(self) -> int:
        """Drop every entry and return how many were dropped."""
        ...
