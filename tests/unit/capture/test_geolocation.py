"""Geolocation controller tests: auto fix, timeout, denial, sticky manual override."""


import pytest

from app.capture.geolocation import GeolocationCaptureController, GeolocationMode
from app.capture.ports import PermissionState, PositionReading
from app.capture.remote import RemotePositionSensor
from app.domain.exceptions import (
    DomainValidationError,
    ErrorCode,
    PermissionDeniedError,
    PositionUnavailableError,
)
from app.domain.models.report import PositionSource
from tests.unit.fakes import wait_for_position_request


@pytest.fixture
def sensor():
    return RemotePositionSensor()


async def test_auto_capture_resolves_position(sensor):
    controller = GeolocationCaptureController(sensor, timeout_seconds=1.0)
    seen = []
    controller.on_position(seen.append)
    assert controller.start_auto_capture() is True
    await wait_for_position_request(sensor)
    assert sensor.report(PositionReading(5.3, -4.0, 12.0)) is True
    await controller.settle()
    assert controller.position.latitude == 5.3
    assert controller.position.source == PositionSource.AUTO
    assert seen == [controller.position]


async def test_auto_capture_times_out(sensor):
    controller = GeolocationCaptureController(sensor, timeout_seconds=0.05)
    errors = []
    controller.on_error(errors.append)
    controller.start_auto_capture()
    await controller.settle()
    assert controller.error.code == ErrorCode.TIMEOUT
    assert controller.position is None
    assert len(errors) == 1
    assert sensor.report(PositionReading(1.0, 1.0)) is False


async def test_permission_denied_recorded(sensor):
    controller = GeolocationCaptureController(sensor, timeout_seconds=1.0)
    controller.start_auto_capture()
    await wait_for_position_request(sensor)
    sensor.report_error(PermissionDeniedError("denied", device="geolocation"))
    await controller.settle()
    assert controller.error.code == ErrorCode.PERMISSION_DENIED
    assert await controller.check_permission() == PermissionState.DENIED


async def test_unsupported_sensor():
    controller = GeolocationCaptureController(RemotePositionSensor(supported=False))
    assert controller.start_auto_capture() is False
    assert controller.error.code == ErrorCode.DEVICE_UNSUPPORTED


async def test_manual_override_wins_over_late_auto_result(sensor):
    controller = GeolocationCaptureController(sensor, timeout_seconds=1.0)
    controller.start_auto_capture()
    await wait_for_position_request(sensor)
    manual = controller.set_manual(48.85, 2.35)
    sensor.report(PositionReading(0.5, 0.5))
    await controller.settle()
    assert controller.position == manual
    assert controller.mode == GeolocationMode.MANUAL


async def test_manual_mode_is_sticky(sensor):
    controller = GeolocationCaptureController(sensor)
    controller.set_manual(10.0, 10.0)
    assert controller.start_auto_capture() is False
    assert controller.mode == GeolocationMode.MANUAL


async def test_late_error_after_manual_is_discarded(sensor):
    controller = GeolocationCaptureController(sensor, timeout_seconds=1.0)
    controller.start_auto_capture()
    await wait_for_position_request(sensor)
    controller.set_manual(1.0, 2.0)
    sensor.report_error(PositionUnavailableError("no fix"))
    await controller.settle()
    assert controller.error is None
    assert controller.position.source == PositionSource.MANUAL


async def test_manual_rejects_out_of_range(sensor):
    controller = GeolocationCaptureController(sensor)
    with pytest.raises(DomainValidationError):
        controller.set_manual(120.0, 0.0)
    assert controller.mode == GeolocationMode.AUTO


async def test_reset_restores_auto_mode(sensor):
    controller = GeolocationCaptureController(sensor)
    controller.set_manual(1.0, 1.0)
    await controller.reset()
    assert controller.mode == GeolocationMode.AUTO
    assert controller.position is None


async def test_permission_defaults_to_prompt(sensor):
    controller = GeolocationCaptureController(sensor)
    assert await controller.check_permission() == PermissionState.PROMPT
