"""Wiring of ports to adapters.

Bindings are explicit: each port type maps to a factory, and shared
adapters (the location provider, the geocoder, the store) are created
once on first resolve. Tests re-register a port to swap in a fake.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, NamedTuple, Optional

from pydantic import ValidationError

from .config import AppConfig, get_config
from .domain.errors import ConfigurationError

_MISSING = object()


class _Binding(NamedTuple):
    factory: Callable[[], Any]
    shared: bool


@dataclass
class Container:
    """Registry of factories keyed by port type.

    Usage:
        container = Container.create_default()
        journal = container.resolve(PlaceJournalService)

        container.register(LocationProviderPort, SimulatedLocationProvider)

    Attributes:
        config: Configuration the default bindings are built from
    """

    config: AppConfig = field(default_factory=get_config)

    _bindings: Dict[type[Any], _Binding] = field(default_factory=dict, repr=False)
    _instances: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Bind a port type to a factory, dropping any instance already built.

        With singleton=False every resolve() calls the factory again.
        """
        with self._lock:
            self._bindings[port_type] = _Binding(factory, singleton)
            self._instances.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Return the instance bound to a port type.

        Raises:
            KeyError: If nothing is bound to the type.
        """
        with self._lock:
            binding = self._bindings.get(port_type)
            if binding is None:
                raise KeyError(f"No binding for {port_type!r}")
            if not binding.shared:
                return binding.factory()

            instance = self._instances.get(port_type, _MISSING)
            if instance is _MISSING:
                instance = self._instances[port_type] = binding.factory()
            return instance

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._bindings

    def clear_singletons(self) -> None:
        """Forget shared instances; the next resolve() rebuilds them."""
        with self._lock:
            self._instances.clear()

    @classmethod
    def create_default(
        cls,
        config: Optional[AppConfig] = None,
        consent: Optional[Callable[[], Any]] = None,
    ) -> Container:
        """Bind every port to the adapter the configuration selects.

        Each resolve() of a controller builds a new one over the shared
        provider and geocoder, one per consumer.

        Args:
            config: Configuration to use instead of the environment.
            consent: Permission prompt for the IP location provider.

        Raises:
            ConfigurationError: If the environment holds an invalid setting.
        """
        from .adapters.geocoding import NominatimGeocoderAdapter
        from .adapters.location import IPGeolocationProvider, SimulatedLocationProvider
        from .adapters.photos import FilePhotoHolder
        from .adapters.rendering import FoliumMapRenderer
        from .adapters.storage import SQLitePlaceStore
        from .ports.geocoding import GeocoderPort
        from .ports.location import LocationProviderPort
        from .ports.rendering import MapRendererPort
        from .ports.storage import PhotoHolderPort, PlaceStorePort
        from .services import (
            LocationAcquisitionController,
            PlaceJournalService,
            SearchQueryController,
        )

        if config is None:
            try:
                config = get_config()
            except ValidationError as e:
                first = e.errors()[0] if e.errors() else {}
                setting = ".".join(str(part) for part in first.get("loc", ()))
                raise ConfigurationError(
                    f"Invalid configuration: {setting or 'unknown setting'}",
                    setting_name=setting,
                    expected_type=first.get("type"),
                    cause=e,
                )
        container = cls(config=config)

        # Location
        def create_location_provider() -> LocationProviderPort:
            if config.location.provider == "simulated":
                return SimulatedLocationProvider.at(
                    config.location.simulated_latitude,
                    config.location.simulated_longitude,
                    authorized=config.location.preauthorized,
                )
            return IPGeolocationProvider(config.location, consent=consent)

        container.register(LocationProviderPort, create_location_provider)

        # Geocoding
        container.register(
            GeocoderPort,
            lambda: NominatimGeocoderAdapter(config.geocoding),
        )

        # Storage
        container.register(
            PlaceStorePort,
            lambda: SQLitePlaceStore(config.storage.database_path),
        )
        container.register(
            PhotoHolderPort,
            lambda: FilePhotoHolder(max_bytes=config.storage.max_photo_bytes),
        )

        # Rendering
        container.register(MapRendererPort, lambda: FoliumMapRenderer())

        # Services
        container.register(
            LocationAcquisitionController,
            lambda: LocationAcquisitionController(
                provider=container.resolve(LocationProviderPort),
                config=config.location,
            ),
            singleton=False,
        )
        container.register(
            SearchQueryController,
            lambda: SearchQueryController(
                geocoder=container.resolve(GeocoderPort),
                config=config.search,
            ),
            singleton=False,
        )
        container.register(
            PlaceJournalService,
            lambda: PlaceJournalService(
                store=container.resolve(PlaceStorePort),
                photo_holder=container.resolve(PhotoHolderPort),
                map_renderer=container.resolve(MapRendererPort),
            ),
        )

        return container
