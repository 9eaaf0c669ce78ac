"""Geolocation capture controller: auto-capture racing a timeout, with a sticky manual override."""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Callable, Optional

from app.capture.ports import PermissionState, PositionReading, PositionSensor
from app.domain.exceptions import (
    DeviceError,
    DeviceUnsupportedError,
    GeolocationTimeoutError,
)
from app.domain.models.report import Position, PositionSource
from app.domain.validators.report_validator import validate_coordinates

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

PositionListener = Callable[[Position], None]
ErrorListener = Callable[[DeviceError], None]


class GeolocationMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class GeolocationCaptureController:
    """
    Auto-capture issues one bounded request; manual override wins for the rest of
    the draft. Auto results arriving after a manual override are discarded.
    """

    def __init__(
        self,
        sensor: PositionSensor,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._sensor = sensor
        self._timeout = timeout_seconds
        self._mode = GeolocationMode.AUTO
        self._position: Optional[Position] = None
        self._error: Optional[DeviceError] = None
        self._task: Optional[asyncio.Task] = None
        self._position_listeners: list[PositionListener] = []
        self._error_listeners: list[ErrorListener] = []

    @property
    def mode(self) -> GeolocationMode:
        return self._mode

    @property
    def position(self) -> Optional[Position]:
        return self._position

    @property
    def error(self) -> Optional[DeviceError]:
        return self._error

    @property
    def is_locating(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_position(self, listener: PositionListener) -> None:
        self._position_listeners.append(listener)

    def on_error(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def start_auto_capture(self) -> bool:
        """Issue one auto-capture request. Returns False if ignored (manual mode, in flight, unsupported)."""
        if self._mode == GeolocationMode.MANUAL:
            logger.info("auto_capture_skipped_manual_mode")
            return False
        if self.is_locating:
            return False
        if not self._sensor.is_supported():
            self._fail(
                DeviceUnsupportedError(
                    "Geolocation is not supported on this device", device="geolocation"
                )
            )
            return False
        self._error = None
        self._task = asyncio.create_task(self._capture())
        logger.info("auto_capture_started", extra={"timeout_seconds": self._timeout})
        return True

    def set_manual(
        self,
        latitude: float,
        longitude: float,
        accuracy_meters: Optional[float] = None,
    ) -> Position:
        """Place the position by hand. Auto mode cannot be re-enabled for this draft."""
        validate_coordinates(latitude, longitude)
        self._mode = GeolocationMode.MANUAL
        self._error = None
        position = Position(
            latitude=latitude,
            longitude=longitude,
            accuracy_meters=accuracy_meters,
            source=PositionSource.MANUAL,
        )
        self._position = position
        logger.info("manual_position_set")
        self._emit_position(position)
        return position

    async def check_permission(self) -> PermissionState:
        """Current permission state; 'prompt' when the sensor cannot tell."""
        try:
            return await self._sensor.permission_state()
        except DeviceError as e:
            logger.warning("permission_state_unknown", extra={"code": e.code.value})
            return PermissionState.PROMPT

    async def settle(self) -> None:
        """Wait for the in-flight auto-capture (if any) to resolve, fail or time out."""
        task = self._task
        if task is not None and not task.done():
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.shield(task)

    async def reset(self) -> None:
        """New draft: cancel any in-flight request and clear mode, position and error."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._mode = GeolocationMode.AUTO
        self._position = None
        self._error = None

    async def _capture(self) -> None:
        try:
            reading = await asyncio.wait_for(
                self._sensor.current_position(high_accuracy=True),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error: DeviceError = GeolocationTimeoutError(
                f"Position not acquired within {self._timeout:g}s"
            )
        except DeviceError as e:
            error = e
        else:
            self._apply_auto(reading)
            return
        if self._mode == GeolocationMode.MANUAL:
            logger.info("auto_capture_error_discarded", extra={"code": error.code.value})
            return
        self._fail(error)

    def _apply_auto(self, reading: PositionReading) -> None:
        if self._mode == GeolocationMode.MANUAL:
            logger.info("auto_position_discarded")
            return
        position = Position(
            latitude=reading.latitude,
            longitude=reading.longitude,
            accuracy_meters=reading.accuracy_meters,
            source=PositionSource.AUTO,
        )
        self._position = position
        logger.info(
            "auto_position_resolved",
            extra={"accuracy_meters": reading.accuracy_meters},
        )
        self._emit_position(position)

    def _fail(self, error: DeviceError) -> None:
        self._error = error
        self._position = None
        logger.warning("auto_capture_failed", extra={"code": error.code.value})
        for listener in list(self._error_listeners):
            listener(error)

    def _emit_position(self, position: Position) -> None:
        for listener in list(self._position_listeners):
            listener(position)
