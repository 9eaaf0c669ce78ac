"""Device ports used by the capture controllers. Adapters implement these protocols."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol


class PermissionState(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PROMPT = "prompt"


@dataclass(frozen=True)
class PositionReading:
    """Raw sensor fix."""

    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None


class RecordingHandle(Protocol):
    """An acquired recording device. Exactly one of stop() / release() ends it."""

    async def stop(self) -> tuple[bytes, str]:
        """Seal the recording; return (content, declared media type) and release the device."""
        ...

    async def release(self) -> None:
        """Release the device and discard anything recorded."""
        ...


class Microphone(Protocol):
    def is_supported(self) -> bool:
        """False when the device has no recording capability."""
        ...

    async def acquire(self) -> RecordingHandle:
        """Request permission and start recording. Raises PermissionDeniedError if refused."""
        ...


class PositionSensor(Protocol):
    def is_supported(self) -> bool:
        ...

    async def current_position(self, high_accuracy: bool = True) -> PositionReading:
        """Single fix. Raises PermissionDeniedError or PositionUnavailableError."""
        ...

    async def permission_state(self) -> PermissionState:
        ...


class ImageCompressor(Protocol):
    async def compress(self, content: bytes, media_type: str) -> tuple[bytes, str]:
        """Return (compressed content, resulting media type)."""
        ...
