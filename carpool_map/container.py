"""Dependency injection container.

A small registry of factories keyed by port or service type. No
framework: bindings are explicit, adapters are built lazily on first
resolve, and tests swap any binding with ``register``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(MapViewService)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Bind ``port_type`` to ``factory``, replacing any earlier binding."""
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a registered type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Drop cached singletons so the next resolve builds fresh ones."""
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with the production bindings.

        The record store backend follows ``config.store.backend``; the JSON
        backend is only built (and its file read) on first resolve.
        """
        from .adapters.cache import InMemoryCache
        from .adapters.geocoding import NominatimGeocoderAdapter
        from .adapters.rendering import FoliumMapRenderer
        from .adapters.store import InMemoryRecordStore, JsonFileRecordStore
        from .ports.cache import CachePort
        from .ports.geocoding import GeocoderPort
        from .ports.rendering import MapRendererPort
        from .ports.store import RecordStorePort
        from .services import (
            CheckInService,
            LocationResolver,
            LocationWriter,
            MapViewService,
        )

        config = config or get_config()
        container = cls(config=config)

        # Geocoding results cache
        cache: InMemoryCache[Any] = InMemoryCache(
            ttl_seconds=config.geocoding.cache_ttl_seconds,
            max_size=config.geocoding.cache_max_size,
            name="geocode",
        )
        container.register(CachePort, lambda: cache)

        container.register(
            GeocoderPort,
            lambda: NominatimGeocoderAdapter(config.geocoding, cache),
        )

        def create_store() -> RecordStorePort:
            if config.store.backend == "json":
                return JsonFileRecordStore.from_config(config.store)
            return InMemoryRecordStore()

        container.register(RecordStorePort, create_store)

        container.register(
            MapRendererPort,
            lambda: FoliumMapRenderer(config.map),
        )

        container.register(
            MapViewService,
            lambda: MapViewService(
                store=container.resolve(RecordStorePort),
                renderer=container.resolve(MapRendererPort),
                config=config.map,
            ),
        )
        def create_writer() -> LocationWriter:
            writer = LocationWriter(store=container.resolve(RecordStorePort))
            # Saved locations must show up on the next map build
            writer.on_saved.append(
                lambda entity, entity_id: container.resolve(MapViewService).invalidate()
            )
            return writer

        container.register(LocationWriter, create_writer)
        container.register(
            CheckInService,
            lambda: CheckInService(config.checkin),
        )

        # One resolver per location field
        container.register(
            LocationResolver,
            lambda: LocationResolver(
                geocoder=container.resolve(GeocoderPort),
                config=config.search,
                result_limit=config.geocoding.result_limit,
            ),
            singleton=False,
        )

        return container


_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container, creating it on first use."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
