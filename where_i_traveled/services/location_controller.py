"""Location acquisition controller.

Mediates between a permission-gated location provider and a consumer
that wants "give me one fix, or tell me why you can't". The controller
is the provider's delegate and owns all state; every mutation happens on
the event loop that owns the controller.

State machine:
- UNDETERMINED --request_permission--> outcome delivered by provider
- authorized, idle --start--> acquiring, last_error cleared
- acquiring --readings--> idle, last_fix = newest reading, provider stopped
- acquiring --failure--> idle, last_error = message, provider stopped
- any --stop--> idle
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..config import LocationConfig, get_config
from ..domain.models import AuthorizationStatus, LocationFix, LocationStatus
from ..ports.location import LocationProviderPort

StatusListener = Callable[[LocationStatus], None]


@dataclass
class LocationAcquisitionController:
    """Single-shot location acquisition with observable status.

    Provider failures never raise to the caller; they end the attempt in
    the "no fix, error present" state and can be retried with start().

    Attributes:
        provider: The location provider (shared, single-outstanding-request)
        config: Location configuration (auto-start policy)
    """

    provider: LocationProviderPort
    config: LocationConfig = field(default_factory=lambda: get_config().location)

    authorization_status: AuthorizationStatus = field(
        init=False, default=AuthorizationStatus.UNDETERMINED
    )
    last_fix: Optional[LocationFix] = field(init=False, default=None)
    is_acquiring: bool = field(init=False, default=False)
    last_error: Optional[str] = field(init=False, default=None)

    _permission_requested: bool = field(init=False, default=False, repr=False)
    _listeners: List[StatusListener] = field(default_factory=list, repr=False)
    _idle: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._idle.set()
        self.authorization_status = self.provider.authorization_status
        self.provider.set_delegate(self)

    @property
    def status(self) -> LocationStatus:
        """Snapshot of the observable state."""
        return LocationStatus(
            authorization_status=self.authorization_status,
            last_fix=self.last_fix,
            is_acquiring=self.is_acquiring,
            last_error=self.last_error,
        )

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a listener called with a snapshot on every change.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def request_permission(self) -> None:
        """Show the provider's permission prompt once per undetermined state."""
        if self.authorization_status is not AuthorizationStatus.UNDETERMINED:
            self._logger.debug(
                "Permission already decided",
                extra={"status": self.authorization_status.name},
            )
            return
        if self._permission_requested:
            return

        self._permission_requested = True
        self._logger.info("Requesting location permission")
        self.provider.request_permission()

    def start(self) -> None:
        """Begin acquiring one fix if authorized and not already acquiring."""
        if not self.authorization_status.is_authorized:
            self._logger.debug(
                "Start ignored, not authorized",
                extra={"status": self.authorization_status.name},
            )
            return
        if self.is_acquiring:
            return

        self.is_acquiring = True
        self.last_error = None
        self._idle.clear()
        self._notify()
        self._logger.info("Location acquisition started")

        try:
            self.provider.start_updates()
        except Exception as e:
            self._logger.warning(
                "Location provider failed to start",
                extra={"error": str(e)},
            )
            self._fail(e)

    def stop(self) -> None:
        """Halt any outstanding acquisition. Always safe to call."""
        was_acquiring = self.is_acquiring
        self.is_acquiring = False
        self._idle.set()
        self.provider.stop_updates()
        if was_acquiring:
            self._notify()

    async def wait_until_idle(self, timeout: Optional[float] = None) -> LocationStatus:
        """Wait for the current acquisition to end.

        Raises:
            asyncio.TimeoutError: If the acquisition outlives the timeout.
        """
        await asyncio.wait_for(self._idle.wait(), timeout)
        return self.status

    # Provider delegate

    def on_authorization_changed(self, status: AuthorizationStatus) -> None:
        previous = self.authorization_status
        self.authorization_status = status
        consumer_waiting = self._permission_requested
        if status is not AuthorizationStatus.UNDETERMINED:
            self._permission_requested = False
        if status is previous:
            return

        self._logger.info(
            "Location authorization changed",
            extra={"previous": previous.name, "status": status.name},
        )
        if not status.is_authorized and self.is_acquiring:
            self.stop()
        else:
            self._notify()

        if (
            status.is_authorized
            and not previous.is_authorized
            and consumer_waiting
            and self.config.auto_start_on_authorization
        ):
            self.start()

    def on_locations(self, fixes: Sequence[LocationFix]) -> None:
        if not self.is_acquiring or not fixes:
            self._logger.debug(
                "Ignoring readings outside an acquisition",
                extra={"count": len(fixes)},
            )
            return

        self.last_fix = fixes[-1]
        self._logger.info(
            "Location fix acquired",
            extra={
                "lat": self.last_fix.location.latitude,
                "lon": self.last_fix.location.longitude,
            },
        )
        # One good fix is enough.
        self.stop()

    def on_error(self, error: Exception) -> None:
        if not self.is_acquiring:
            self._logger.debug(
                "Ignoring provider error outside an acquisition",
                extra={"error": str(error)},
            )
            return

        self._logger.warning(
            "Location acquisition failed",
            extra={"error": str(error)},
        )
        self._fail(error)

    def _fail(self, error: Exception) -> None:
        self.last_error = getattr(error, "message", None) or str(error)
        self.stop()

    def _notify(self) -> None:
        snapshot = self.status
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._logger.exception("Location status listener failed")
