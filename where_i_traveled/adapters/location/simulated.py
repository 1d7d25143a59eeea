"""Scripted location provider.

Delivers a fixed permission outcome and a fixed set of readings (or a
failure) on the next event loop iteration, the way a platform service
would call back later. Call counters and emit_* helpers let tests drive
and inspect the exchange with a controller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from ...domain.models import AuthorizationStatus, GeoLocation, LocationFix
from ...ports.location import LocationProviderDelegate


@dataclass
class SimulatedLocationProvider:
    """In-process LocationProviderPort implementation.

    Attributes:
        initial_status: Authorization status before any prompt
        permission_outcome: Status delivered after request_permission()
        readings: Readings delivered after start_updates()
        failure: If set, delivered instead of the readings
        auto_deliver: If False, nothing is delivered until emit_* is called
    """

    initial_status: AuthorizationStatus = AuthorizationStatus.UNDETERMINED
    permission_outcome: AuthorizationStatus = AuthorizationStatus.AUTHORIZED_FULL
    readings: Sequence[LocationFix] = ()
    failure: Optional[Exception] = None
    auto_deliver: bool = True

    permission_requests: int = field(init=False, default=0)
    start_calls: int = field(init=False, default=0)
    stop_calls: int = field(init=False, default=0)

    _status: AuthorizationStatus = field(init=False, repr=False)
    _delegate: Optional[LocationProviderDelegate] = field(
        init=False, default=None, repr=False
    )
    _updating: bool = field(init=False, default=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._status = self.initial_status
        self._logger = logging.getLogger(__name__)

    @classmethod
    def at(
        cls,
        latitude: float,
        longitude: float,
        authorized: bool = True,
    ) -> SimulatedLocationProvider:
        """Provider that reports a single reading at the given coordinates."""
        fix = LocationFix(
            location=GeoLocation(latitude=latitude, longitude=longitude),
            timestamp=datetime.now(timezone.utc),
        )
        initial = (
            AuthorizationStatus.AUTHORIZED_FULL
            if authorized
            else AuthorizationStatus.UNDETERMINED
        )
        return cls(initial_status=initial, readings=(fix,))

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self._status

    @property
    def is_updating(self) -> bool:
        return self._updating

    def set_delegate(self, delegate: Optional[LocationProviderDelegate]) -> None:
        self._delegate = delegate

    def request_permission(self) -> None:
        self.permission_requests += 1
        if self.auto_deliver:
            self._schedule(lambda: self.set_authorization(self.permission_outcome))

    def start_updates(self) -> None:
        self.start_calls += 1
        if self._updating:
            return
        self._updating = True
        if self.auto_deliver:
            self._schedule(self._deliver)

    def stop_updates(self) -> None:
        self.stop_calls += 1
        self._updating = False

    # Manual drivers

    def set_authorization(self, status: AuthorizationStatus) -> None:
        """Change the status and notify the delegate immediately."""
        self._status = status
        if self._delegate is not None:
            self._delegate.on_authorization_changed(status)

    def emit_locations(self, fixes: Sequence[LocationFix]) -> None:
        """Push readings to the delegate immediately."""
        if self._delegate is not None:
            self._delegate.on_locations(list(fixes))

    def emit_error(self, error: Exception) -> None:
        """Push a failure to the delegate immediately."""
        if self._delegate is not None:
            self._delegate.on_error(error)

    def _deliver(self) -> None:
        if not self._updating:
            return
        if self.failure is not None:
            self.emit_error(self.failure)
        elif self.readings:
            self.emit_locations(self.readings)

    def _schedule(self, callback: Callable[[], None]) -> None:
        asyncio.get_running_loop().call_soon(callback)
