"""Centralized configuration using Pydantic Settings.

This module is the single source of truth for tunables of the carpool
map: geocoding client settings, search debounce, map defaults, check-in
radius, record store backend and logging.

Configuration can be overridden via environment variables:
- CPM_GEO_USER_AGENT=my-team-app
- CPM_SEARCH_DEBOUNCE_SECONDS=0.3
- CPM_MAP_FIT_MAX_ZOOM=14
- CPM_CHECKIN_RADIUS_METERS=250
- CPM_STORE_BACKEND=json
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeocodingConfig(BaseSettings):
    """Geocoding service configuration.

    Environment variables prefixed with CPM_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_GEO_")

    user_agent: str = "TeamOrganizationApp/1.0"
    domain: str = "nominatim.openstreetmap.org"
    language: str = "en"
    timeout_seconds: int = 10
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    result_limit: int = Field(default=5, ge=1, le=50)
    cache_ttl_seconds: Optional[float] = 3600.0
    cache_max_size: Optional[int] = 512


class SearchConfig(BaseSettings):
    """Address search behaviour while the user types.

    Environment variables prefixed with CPM_SEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_SEARCH_")

    debounce_seconds: float = Field(default=0.5, ge=0.0)
    min_query_length: int = Field(default=3, ge=1)


class MapConfig(BaseSettings):
    """Map rendering defaults.

    Environment variables prefixed with CPM_MAP_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_MAP_")

    default_lat: float = 43.65
    default_lng: float = -79.38
    default_zoom: int = 12
    fit_padding: int = 50
    fit_max_zoom: int = 13
    tiles: str = "OpenStreetMap"


class CheckInConfig(BaseSettings):
    """Check-in proximity settings.

    Environment variables prefixed with CPM_CHECKIN_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_CHECKIN_")

    radius_meters: float = Field(default=500.0, gt=0)


class StoreConfig(BaseSettings):
    """Record store backend.

    Environment variables prefixed with CPM_STORE_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_STORE_")

    backend: Literal["memory", "json"] = "memory"
    data_path: Optional[Path] = None


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with CPM_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Append extra={} fields as key=value pairs


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.search.debounce_seconds)
        print(config.map.fit_max_zoom)

    Environment variables prefixed with CPM_.
    """

    model_config = SettingsConfigDict(env_prefix="CPM_")

    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    map: MapConfig = Field(default_factory=MapConfig)
    checkin: CheckInConfig = Field(default_factory=CheckInConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    output_dir: Path = Field(default_factory=Path.cwd)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()
