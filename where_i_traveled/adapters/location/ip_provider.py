"""IP geolocation provider.

Desktop and CLI hosts have no GPS, so this provider estimates the
position from the public IP address using an HTTP geolocation endpoint
(ipapi.co by default). The permission prompt is a consent callable
supplied by the host, e.g. a click confirmation.

Blocking work (the prompt and the HTTP call) runs in the loop's default
executor; completions are delivered to the delegate from the future's
done-callback, which asyncio runs on the owning event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

import requests

from ...config import LocationConfig, get_config
from ...domain.errors import LocationUnavailableError
from ...domain.models import AuthorizationStatus, GeoLocation, LocationFix
from ...ports.location import LocationProviderDelegate

ConsentPrompt = Callable[[], AuthorizationStatus]


@dataclass
class IPGeolocationProvider:
    """LocationProviderPort backed by an IP geolocation service.

    Attributes:
        config: Location configuration (endpoint, timeout, preauthorization)
        consent: Blocking callable asking the user for permission; without
            one, a permission request resolves to RESTRICTED
        session: HTTP session used for lookups
    """

    config: LocationConfig = field(default_factory=lambda: get_config().location)
    consent: Optional[ConsentPrompt] = None
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _status: AuthorizationStatus = field(init=False, repr=False)
    _delegate: Optional[LocationProviderDelegate] = field(
        init=False, default=None, repr=False
    )
    _pending: Optional[asyncio.Future[LocationFix]] = field(
        init=False, default=None, repr=False
    )
    _active: bool = field(init=False, default=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._status = (
            AuthorizationStatus.AUTHORIZED_FULL
            if self.config.preauthorized
            else AuthorizationStatus.UNDETERMINED
        )

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self._status

    def set_delegate(self, delegate: Optional[LocationProviderDelegate]) -> None:
        self._delegate = delegate

    def request_permission(self) -> None:
        loop = asyncio.get_running_loop()
        if self.consent is None:
            self._logger.warning("No consent prompt configured, location restricted")
            loop.call_soon(self._apply_status, AuthorizationStatus.RESTRICTED)
            return

        future = loop.run_in_executor(None, self.consent)
        future.add_done_callback(self._on_consent_done)

    def start_updates(self) -> None:
        self._active = True
        if self._pending is not None:
            return

        loop = asyncio.get_running_loop()
        self._logger.debug(
            "Looking up IP location",
            extra={"url": self.config.ip_lookup_url},
        )
        self._pending = loop.run_in_executor(None, self._lookup)
        self._pending.add_done_callback(self._on_lookup_done)

    def stop_updates(self) -> None:
        # The HTTP call cannot be interrupted; its result is dropped instead.
        self._active = False

    def _on_consent_done(self, future: asyncio.Future[AuthorizationStatus]) -> None:
        error = future.exception()
        if error is not None:
            self._logger.warning(
                "Consent prompt failed",
                extra={"error": str(error)},
            )
            self._apply_status(AuthorizationStatus.DENIED)
            return
        self._apply_status(future.result())

    def _apply_status(self, status: AuthorizationStatus) -> None:
        self._status = status
        if self._delegate is not None:
            self._delegate.on_authorization_changed(status)

    def _on_lookup_done(self, future: asyncio.Future[LocationFix]) -> None:
        self._pending = None
        if not self._active:
            return
        self._active = False
        if self._delegate is None:
            return

        error = future.exception()
        if error is not None:
            self._delegate.on_error(error)
        else:
            self._delegate.on_locations([future.result()])

    def _lookup(self) -> LocationFix:
        try:
            response = self.session.get(
                self.config.ip_lookup_url,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except ValueError as e:
            # JSON decode errors; requests' variant is also a RequestException.
            raise LocationUnavailableError(
                "Location service returned an invalid response",
                reason="payload",
                cause=e,
            )
        except requests.RequestException as e:
            raise LocationUnavailableError(
                "Location lookup failed",
                reason="network",
                cause=e,
            )

        return LocationFix(
            location=_parse_location(payload),
            timestamp=datetime.now(timezone.utc),
        )


def _parse_location(payload: Mapping[str, Any]) -> GeoLocation:
    """Read coordinates from the common IP geolocation payload shapes.

    Supports ipapi.co ("latitude"/"longitude"), ip-api.com ("lat"/"lon")
    and ipinfo.io ("loc": "lat,lon").
    """
    if not isinstance(payload, Mapping):
        raise LocationUnavailableError(
            "Location service returned an invalid response",
            reason="payload",
        )
    try:
        if "latitude" in payload and "longitude" in payload:
            return GeoLocation(float(payload["latitude"]), float(payload["longitude"]))
        if "lat" in payload and "lon" in payload:
            return GeoLocation(float(payload["lat"]), float(payload["lon"]))
        if "loc" in payload:
            lat, lon = str(payload["loc"]).split(",", 1)
            return GeoLocation(float(lat), float(lon))
    except (TypeError, ValueError) as e:
        raise LocationUnavailableError(
            "Location service returned invalid coordinates",
            reason="payload",
            cause=e,
        )

    reason = payload.get("reason") or payload.get("message") or "no coordinates"
    raise LocationUnavailableError(
        f"Location service could not locate this device ({reason})",
        reason="payload",
    )
