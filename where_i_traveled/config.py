"""Settings for the journal, read from WIT_* environment variables.

One settings group per concern: location provider, search debounce,
geocoding etiquette, storage and logging. Examples:
- WIT_LOCATION_PROVIDER=simulated
- WIT_SEARCH_DEBOUNCE_SECONDS=0.5
- WIT_STORAGE_DATABASE_PATH=/path/to/places.sqlite
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocationConfig(BaseSettings):
    """Location provider configuration.

    Environment variables prefixed with WIT_LOCATION_.
    """

    model_config = SettingsConfigDict(env_prefix="WIT_LOCATION_")

    provider: Literal["ip", "simulated"] = "ip"
    # Start acquiring as soon as a requested permission is granted.
    auto_start_on_authorization: bool = True
    preauthorized: bool = False
    ip_lookup_url: str = "https://ipapi.co/json/"
    timeout_seconds: float = 10.0
    simulated_latitude: float = 48.8566
    simulated_longitude: float = 2.3522


class SearchConfig(BaseSettings):
    """Search-as-you-type configuration.

    Environment variables prefixed with WIT_SEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="WIT_SEARCH_")

    debounce_seconds: float = Field(default=0.3, ge=0)
    min_query_length: int = Field(default=2, ge=1)
    empty_results_message: str = (
        "No results. Try adding more detail (e.g., 'Paris, France')."
    )


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with WIT_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="WIT_GEO_")

    user_agent: str = "where-i-traveled"
    timeout_seconds: int = 10
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    language: str = "en"
    results_limit: int = 10
    # 0 disables caching.
    cache_ttl_seconds: float = Field(default=3600.0, ge=0)


class StorageConfig(BaseSettings):
    """Place storage configuration.

    Environment variables prefixed with WIT_STORAGE_.
    """

    model_config = SettingsConfigDict(env_prefix="WIT_STORAGE_")

    database_path: Path = Field(
        default_factory=lambda: Path.home() / ".where_i_traveled" / "places.sqlite"
    )
    max_photo_bytes: int = 10 * 1024 * 1024


class ObservabilityConfig(BaseSettings):
    """Log level and output format.

    Environment variables prefixed with WIT_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="WIT_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    # One JSON object per line, extra fields included.
    structured: bool = False


class AppConfig(BaseSettings):
    """All settings groups.

        get_config().search.debounce_seconds
        get_config().storage.database_path
    """

    model_config = SettingsConfigDict(env_prefix="WIT_")

    location: LocationConfig = Field(default_factory=LocationConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return the process-wide settings, read from the environment once."""
    return AppConfig()


def reset_config() -> None:
    """Forget cached settings so the next get_config() re-reads the environment."""
    get_config.cache_clear()
