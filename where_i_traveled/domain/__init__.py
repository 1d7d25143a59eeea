"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    GeocodingError,
    InvalidPlaceError,
    LocationUnavailableError,
    PhotoLoadError,
    PlaceNotFoundError,
    RenderingError,
    StorageError,
    WhereITraveledError,
)
from .models import (
    AuthorizationStatus,
    GeocodedItem,
    GeoLocation,
    LocationFix,
    LocationStatus,
    Place,
    PlaceDraft,
    PlaceSort,
    SearchResult,
    SearchState,
)

__all__ = [
    # Models
    "AuthorizationStatus",
    "GeoLocation",
    "LocationFix",
    "LocationStatus",
    "GeocodedItem",
    "SearchResult",
    "SearchState",
    "Place",
    "PlaceDraft",
    "PlaceSort",
    # Errors
    "WhereITraveledError",
    "LocationUnavailableError",
    "GeocodingError",
    "InvalidPlaceError",
    "PlaceNotFoundError",
    "StorageError",
    "PhotoLoadError",
    "ConfigurationError",
    "RenderingError",
]
