"""Strict per-device draft isolation. No FastAPI."""

from app.security.exceptions import DeviceOwnershipError


class DeviceContext:
    """Validate that the requesting device owns the draft."""

    @staticmethod
    def validate_access(owner_device: str, request_device: str) -> None:
        if not owner_device or not request_device:
            raise DeviceOwnershipError(
                "Device isolation: owner_device and request_device must be non-empty"
            )
        if owner_device != request_device:
            raise DeviceOwnershipError(
                "Device isolation: draft belongs to another device"
            )
