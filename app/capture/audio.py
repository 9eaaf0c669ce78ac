"""Audio capture controller: bounded-duration voice clip from the device microphone."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from app.capture.ports import Microphone, RecordingHandle
from app.domain.exceptions import DeviceError, DeviceUnsupportedError
from app.domain.models.report import AudioAsset

logger = logging.getLogger(__name__)

DEFAULT_MAX_DURATION_SECONDS = 30

AudioStoppedListener = Callable[[AudioAsset], None]
AudioFailedListener = Callable[[DeviceError], None]


class AudioState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


class AudioCaptureController:
    """
    idle -> recording -> stopped, reset() back to idle.
    A clock ticks once per tick_seconds while recording and auto-stops at
    max_duration_seconds. Device errors are kept in `error`, never raised.
    """

    def __init__(
        self,
        microphone: Microphone,
        max_duration_seconds: int = DEFAULT_MAX_DURATION_SECONDS,
        tick_seconds: float = 1.0,
    ) -> None:
        self._microphone = microphone
        self._max_duration = max_duration_seconds
        self._tick = tick_seconds
        self._state = AudioState.IDLE
        self._handle: Optional[RecordingHandle] = None
        self._timer: Optional[asyncio.Task] = None
        self._elapsed = 0
        self._asset: Optional[AudioAsset] = None
        self._error: Optional[DeviceError] = None
        self._listeners: list[AudioStoppedListener] = []
        self._failed_listeners: list[AudioFailedListener] = []

    @property
    def state(self) -> AudioState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == AudioState.RECORDING

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def max_duration_seconds(self) -> int:
        return self._max_duration

    @property
    def asset(self) -> Optional[AudioAsset]:
        return self._asset

    @property
    def error(self) -> Optional[DeviceError]:
        return self._error

    def on_stopped(self, listener: AudioStoppedListener) -> None:
        """Register a listener notified each time a recording is sealed (manual or auto stop)."""
        self._listeners.append(listener)

    def on_failed(self, listener: AudioFailedListener) -> None:
        """Register a listener notified when an active recording cannot be sealed."""
        self._failed_listeners.append(listener)

    async def start(self) -> bool:
        """Acquire the microphone and start the clock. Returns False and sets `error` on failure."""
        if self._state == AudioState.RECORDING:
            return True
        self._error = None
        if not self._microphone.is_supported():
            self._error = DeviceUnsupportedError(
                "Audio recording is not supported on this device", device="microphone"
            )
            logger.warning("microphone_unsupported")
            return False
        try:
            handle = await self._microphone.acquire()
        except DeviceError as e:
            self._error = e
            logger.warning("microphone_unavailable", extra={"code": e.code.value})
            return False

        self._asset = None
        self._handle = handle
        self._elapsed = 0
        self._state = AudioState.RECORDING
        self._timer = asyncio.create_task(self._run_clock())
        logger.info("recording_started", extra={"max_duration_seconds": self._max_duration})
        return True

    async def stop(self) -> Optional[AudioAsset]:
        """Stop and seal. Idempotent once stopped; no-op when idle."""
        if self._state != AudioState.RECORDING:
            return self._asset
        self._cancel_timer()
        await self._seal()
        return self._asset

    async def reset(self) -> None:
        """Back to idle; discard blob and error, release the device if held."""
        self._cancel_timer()
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.release()
        self._asset = None
        self._error = None
        self._elapsed = 0
        self._state = AudioState.IDLE

    async def _run_clock(self) -> None:
        while self._elapsed < self._max_duration:
            await asyncio.sleep(self._tick)
            self._elapsed += 1
        logger.info("recording_max_duration_reached", extra={"elapsed_seconds": self._elapsed})
        # Detach first: a stop() racing with the auto-stop must not cancel the seal.
        self._timer = None
        await self._seal()

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _seal(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            content, media_type = await handle.stop()
        except DeviceError as e:
            self._error = e
            self._state = AudioState.IDLE
            logger.warning("recording_seal_failed", extra={"code": e.code.value})
            for listener in list(self._failed_listeners):
                listener(e)
            return
        self._asset = AudioAsset(
            content=content,
            declared_media_type=media_type,
            duration_seconds=self._elapsed,
        )
        self._state = AudioState.STOPPED
        logger.info(
            "recording_stopped",
            extra={
                "elapsed_seconds": self._elapsed,
                "size_bytes": len(content),
                "media_type": media_type,
            },
        )
        for listener in list(self._listeners):
            listener(self._asset)
