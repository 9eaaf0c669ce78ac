"""
Remote device adapters. The kiosk front end owns the physical microphone and
location sensor and pushes what they produce through the control API; these
adapters turn those pushes into the Microphone / PositionSensor ports.
"""

import asyncio
from typing import Optional

from app.capture.ports import PermissionState, PositionReading
from app.domain.exceptions import (
    DeviceError,
    FileTooLargeError,
    InvalidDraftTransitionError,
    PermissionDeniedError,
)


class RemoteRecordingHandle:
    """Buffers audio chunks pushed by the front end until stop() seals them."""

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._chunks: list[bytes] = []
        self._size = 0
        self._max_bytes = max_bytes
        self._media_type = ""
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def append(self, chunk: bytes, media_type: Optional[str] = None) -> None:
        if self._closed:
            raise InvalidDraftTransitionError("Recording is not in progress")
        size = self._size + len(chunk)
        if self._max_bytes is not None and size > self._max_bytes:
            raise FileTooLargeError(
                f"Audio too large (max {self._max_bytes / 1024 / 1024:.0f}MB)",
                size_bytes=size,
                max_bytes=self._max_bytes,
            )
        if media_type and not self._media_type:
            self._media_type = media_type
        self._chunks.append(chunk)
        self._size = size

    async def stop(self) -> tuple[bytes, str]:
        self._closed = True
        return b"".join(self._chunks), self._media_type

    async def release(self) -> None:
        self._closed = True
        self._chunks.clear()
        self._size = 0


class RemoteMicrophone:
    """Capability and permission are reported by the front end."""

    def __init__(
        self,
        supported: bool = True,
        permission: PermissionState = PermissionState.GRANTED,
        max_bytes: Optional[int] = None,
    ) -> None:
        self._supported = supported
        self._permission = permission
        self._max_bytes = max_bytes
        self._handle: Optional[RemoteRecordingHandle] = None

    def report_capability(self, supported: bool, permission: PermissionState) -> None:
        self._supported = supported
        self._permission = permission

    def is_supported(self) -> bool:
        return self._supported

    async def acquire(self) -> RemoteRecordingHandle:
        if self._permission == PermissionState.DENIED:
            raise PermissionDeniedError("Microphone access was denied", device="microphone")
        self._handle = RemoteRecordingHandle(self._max_bytes)
        return self._handle

    def push(self, chunk: bytes, media_type: Optional[str] = None) -> None:
        if self._handle is None or self._handle.closed:
            raise InvalidDraftTransitionError("Recording is not in progress")
        self._handle.append(chunk, media_type)


class RemotePositionSensor:
    """current_position() waits for the front end to report one fix (or an error)."""

    def __init__(self, supported: bool = True) -> None:
        self._supported = supported
        self._permission = PermissionState.PROMPT
        self._pending: Optional[asyncio.Future] = None

    @property
    def awaiting_reading(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def report_capability(self, supported: bool) -> None:
        self._supported = supported

    def is_supported(self) -> bool:
        return self._supported

    async def current_position(self, high_accuracy: bool = True) -> PositionReading:
        self._pending = asyncio.get_running_loop().create_future()
        try:
            return await self._pending
        finally:
            self._pending = None

    async def permission_state(self) -> PermissionState:
        return self._permission

    def report(self, reading: PositionReading) -> bool:
        """Resolve the pending request. False when nothing is waiting (e.g. it timed out)."""
        if not self.awaiting_reading:
            return False
        self._permission = PermissionState.GRANTED
        self._pending.set_result(reading)
        return True

    def report_error(self, error: DeviceError) -> bool:
        if not self.awaiting_reading:
            return False
        if isinstance(error, PermissionDeniedError):
            self._permission = PermissionState.DENIED
        self._pending.set_exception(error)
        return True
