"""Capture layer: audio, geolocation and image controllers behind device ports."""

from app.capture.audio import AudioCaptureController, AudioState
from app.capture.geolocation import GeolocationCaptureController, GeolocationMode
from app.capture.image import ImageCaptureService, ImageFile, PillowImageCompressor
from app.capture.ports import PermissionState, PositionReading

__all__ = [
    "AudioCaptureController",
    "AudioState",
    "GeolocationCaptureController",
    "GeolocationMode",
    "ImageCaptureService",
    "ImageFile",
    "PermissionState",
    "PillowImageCompressor",
    "PositionReading",
]
