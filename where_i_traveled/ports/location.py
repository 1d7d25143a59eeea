"""Location ports - Abstractions for permission-gated location readings.

A location provider is a single shared capability with at most one
outstanding request. It never blocks the caller: permission outcomes,
readings and failures are delivered later through a delegate, on the
event loop that owns the consuming controller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import AuthorizationStatus, LocationFix


class LocationProviderDelegate(Protocol):
    """Completion sink a location provider calls back into.

    Implementation: services/location_controller.py
    """

    def on_authorization_changed(self, status: AuthorizationStatus) -> None:
        """Receive a new authorization status."""
        ...

    def on_locations(self, fixes: Sequence[LocationFix]) -> None:
        """Receive one or more readings, oldest first."""
        ...

    def on_error(self, error: Exception) -> None:
        """Receive a failure that ended the current request."""
        ...


class LocationProviderPort(Protocol):
    """Port for platform location services.

    Implementations:
    - adapters/location/ip_provider.py (IPGeolocationProvider) - Production
    - adapters/location/simulated.py (SimulatedLocationProvider) - Testing
    """

    @property
    def authorization_status(self) -> AuthorizationStatus:
        """Current authorization status."""
        ...

    def set_delegate(self, delegate: Optional[LocationProviderDelegate]) -> None:
        """Register the completion sink for callbacks."""
        ...

    def request_permission(self) -> None:
        """Show the permission prompt.

        The outcome is delivered via on_authorization_changed and
        cannot be cancelled.
        """
        ...

    def start_updates(self) -> None:
        """Begin producing readings.

        Readings arrive via on_locations; a failure via on_error.
        """
        ...

    def stop_updates(self) -> None:
        """Stop producing readings. Safe to call at any time."""
        ...
