"""Tests for single-shot location acquisition."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from where_i_traveled.adapters.location.simulated import SimulatedLocationProvider
from where_i_traveled.config import LocationConfig
from where_i_traveled.domain.errors import LocationUnavailableError
from where_i_traveled.domain.models import (
    AuthorizationStatus,
    GeoLocation,
    LocationFix,
)
from where_i_traveled.services.location_controller import (
    LocationAcquisitionController,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def fix(lat: float, lon: float, seconds: int = 0) -> LocationFix:
    return LocationFix(
        location=GeoLocation(lat, lon),
        timestamp=NOW + timedelta(seconds=seconds),
    )


def make_controller(provider, **config) -> LocationAcquisitionController:
    return LocationAcquisitionController(
        provider=provider,
        config=LocationConfig(**config),
    )


@pytest.fixture
def authorized_provider() -> SimulatedLocationProvider:
    return SimulatedLocationProvider(
        initial_status=AuthorizationStatus.AUTHORIZED_FULL,
        auto_deliver=False,
    )


def test_controller_registers_as_delegate_and_reads_status(authorized_provider):
    controller = make_controller(authorized_provider)

    assert authorized_provider._delegate is controller
    assert controller.authorization_status is AuthorizationStatus.AUTHORIZED_FULL
    assert controller.is_acquiring is False


@pytest.mark.asyncio
async def test_start_then_reading_records_fix_and_stops():
    """One reading at (37.0, -122.0) becomes last_fix; provider is stopped."""
    provider = SimulatedLocationProvider.at(37.0, -122.0)
    controller = make_controller(provider)

    controller.start()
    assert controller.is_acquiring is True
    status = await controller.wait_until_idle(timeout=1)

    assert status.last_fix.location == GeoLocation(37.0, -122.0)
    assert status.is_acquiring is False
    assert status.last_error is None
    assert provider.is_updating is False
    assert provider.stop_calls >= 1


@pytest.mark.asyncio
async def test_batch_of_readings_keeps_the_newest(authorized_provider):
    controller = make_controller(authorized_provider)

    controller.start()
    authorized_provider.emit_locations(
        [fix(10.0, 10.0), fix(11.0, 11.0, 5), fix(12.0, 12.0, 10)]
    )

    assert controller.last_fix.location == GeoLocation(12.0, 12.0)
    assert controller.is_acquiring is False


def test_repeated_start_issues_one_provider_start(authorized_provider):
    controller = make_controller(authorized_provider)

    controller.start()
    controller.start()
    controller.start()

    assert authorized_provider.start_calls == 1
    assert controller.is_acquiring is True


def test_start_can_repeat_after_previous_attempt_ended(authorized_provider):
    controller = make_controller(authorized_provider)

    controller.start()
    authorized_provider.emit_locations([fix(1.0, 2.0)])
    controller.start()

    assert authorized_provider.start_calls == 2
    assert controller.is_acquiring is True
    assert controller.last_fix.location == GeoLocation(1.0, 2.0)


@pytest.mark.parametrize(
    "status",
    [
        AuthorizationStatus.UNDETERMINED,
        AuthorizationStatus.DENIED,
        AuthorizationStatus.RESTRICTED,
    ],
)
def test_start_is_noop_without_authorization(status):
    provider = SimulatedLocationProvider(initial_status=status, auto_deliver=False)
    controller = make_controller(provider)

    controller.start()

    assert provider.start_calls == 0
    assert controller.is_acquiring is False
    assert controller.last_error is None


@pytest.mark.asyncio
async def test_failure_sets_error_and_leaves_fix_empty():
    provider = SimulatedLocationProvider(
        initial_status=AuthorizationStatus.AUTHORIZED_FULL,
        failure=LocationUnavailableError("Location unknown", reason="unknown"),
    )
    controller = make_controller(provider)

    controller.start()
    status = await controller.wait_until_idle(timeout=1)

    assert status.last_fix is None
    assert status.last_error == "Location unknown"
    assert status.is_acquiring is False
    assert provider.is_updating is False


def test_restart_after_failure_clears_error_and_succeeds(authorized_provider):
    controller = make_controller(authorized_provider)
    controller.start()
    authorized_provider.emit_error(RuntimeError("GPS cold"))
    assert controller.last_error == "GPS cold"

    controller.start()
    assert controller.last_error is None
    authorized_provider.emit_locations([fix(45.0, 7.0)])

    assert controller.last_fix.location == GeoLocation(45.0, 7.0)
    assert controller.last_error is None


def test_readings_and_errors_outside_acquisition_are_ignored(authorized_provider):
    controller = make_controller(authorized_provider)

    authorized_provider.emit_locations([fix(1.0, 1.0)])
    authorized_provider.emit_error(RuntimeError("late"))

    assert controller.last_fix is None
    assert controller.last_error is None


def test_empty_batch_keeps_acquiring(authorized_provider):
    controller = make_controller(authorized_provider)
    controller.start()

    authorized_provider.emit_locations([])

    assert controller.is_acquiring is True
    assert controller.last_fix is None


def test_provider_start_exception_becomes_error(authorized_provider, monkeypatch):
    def boom():
        raise LocationUnavailableError("Location services off", reason="disabled")

    monkeypatch.setattr(authorized_provider, "start_updates", boom)
    controller = make_controller(authorized_provider)

    controller.start()

    assert controller.is_acquiring is False
    assert controller.last_error == "Location services off"


@pytest.mark.asyncio
async def test_request_permission_grant_auto_starts():
    provider = SimulatedLocationProvider(
        permission_outcome=AuthorizationStatus.AUTHORIZED_LIMITED,
        readings=(fix(35.68, 139.69),),
    )
    controller = make_controller(provider)

    controller.request_permission()
    await asyncio.sleep(0)
    assert controller.authorization_status is AuthorizationStatus.AUTHORIZED_LIMITED
    status = await controller.wait_until_idle(timeout=1)

    assert provider.start_calls == 1
    assert status.last_fix.location == GeoLocation(35.68, 139.69)


@pytest.mark.asyncio
async def test_grant_without_auto_start_waits_for_explicit_start():
    provider = SimulatedLocationProvider(readings=(fix(1.0, 1.0),))
    controller = make_controller(provider, auto_start_on_authorization=False)

    controller.request_permission()
    await asyncio.sleep(0)

    assert controller.authorization_status is AuthorizationStatus.AUTHORIZED_FULL
    assert provider.start_calls == 0
    assert controller.is_acquiring is False


def test_external_grant_does_not_auto_start():
    provider = SimulatedLocationProvider(auto_deliver=False)
    controller = make_controller(provider)

    provider.set_authorization(AuthorizationStatus.AUTHORIZED_FULL)

    assert controller.authorization_status is AuthorizationStatus.AUTHORIZED_FULL
    assert provider.start_calls == 0


@pytest.mark.asyncio
async def test_denied_permission_leaves_controller_idle():
    provider = SimulatedLocationProvider(
        permission_outcome=AuthorizationStatus.DENIED,
    )
    controller = make_controller(provider)

    controller.request_permission()
    await asyncio.sleep(0)
    controller.start()

    assert controller.authorization_status is AuthorizationStatus.DENIED
    assert provider.start_calls == 0
    assert controller.is_acquiring is False


def test_permission_prompt_requested_once_while_pending():
    provider = SimulatedLocationProvider(auto_deliver=False)
    controller = make_controller(provider)

    controller.request_permission()
    controller.request_permission()

    assert provider.permission_requests == 1


def test_permission_not_requested_once_decided(authorized_provider):
    controller = make_controller(authorized_provider)

    controller.request_permission()

    assert authorized_provider.permission_requests == 0


def test_revoking_authorization_stops_acquisition(authorized_provider):
    controller = make_controller(authorized_provider)
    controller.start()

    authorized_provider.set_authorization(AuthorizationStatus.DENIED)
    authorized_provider.emit_locations([fix(1.0, 1.0)])

    assert controller.is_acquiring is False
    assert controller.last_fix is None
    assert authorized_provider.is_updating is False


def test_revoking_authorization_while_acquiring_notifies_once(authorized_provider):
    controller = make_controller(authorized_provider)
    seen = []
    controller.subscribe(seen.append)
    controller.start()

    authorized_provider.set_authorization(AuthorizationStatus.DENIED)

    assert [(s.is_acquiring, s.authorization_status) for s in seen] == [
        (True, AuthorizationStatus.AUTHORIZED_FULL),
        (False, AuthorizationStatus.DENIED),
    ]


def test_stop_is_idempotent(authorized_provider):
    controller = make_controller(authorized_provider)
    seen = []
    controller.subscribe(seen.append)

    controller.stop()
    controller.start()
    controller.stop()
    controller.stop()

    assert controller.is_acquiring is False
    assert [s.is_acquiring for s in seen] == [True, False]


def test_listeners_receive_snapshots(authorized_provider):
    controller = make_controller(authorized_provider)
    seen = []
    unsubscribe = controller.subscribe(seen.append)

    controller.start()
    authorized_provider.emit_locations([fix(3.0, 4.0)])
    unsubscribe()
    controller.start()

    assert len(seen) == 2
    assert seen[0].is_acquiring is True
    assert seen[1].last_fix.location == GeoLocation(3.0, 4.0)


@pytest.mark.asyncio
async def test_wait_until_idle_times_out_without_delivery(authorized_provider):
    controller = make_controller(authorized_provider)
    controller.start()

    with pytest.raises(asyncio.TimeoutError):
        await controller.wait_until_idle(timeout=0.05)

    assert controller.is_acquiring is True
