"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the controllers
testable without a real location service or network.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .cache import CachePort
from .geocoding import GeocoderPort
from .location import LocationProviderDelegate, LocationProviderPort
from .rendering import MapRendererPort
from .storage import PhotoHolderPort, PlaceStorePort

__all__ = [
    # Location
    "LocationProviderPort",
    "LocationProviderDelegate",
    # Geocoding
    "GeocoderPort",
    # Storage
    "PlaceStorePort",
    "PhotoHolderPort",
    # Rendering
    "MapRendererPort",
    # Cache
    "CachePort",
]
