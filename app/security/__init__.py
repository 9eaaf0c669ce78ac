"""Security: device isolation, encryption of device-local identity. No FastAPI."""

from app.security.device_context import DeviceContext
from app.security.encryption import EncryptionService

__all__ = [
    "DeviceContext",
    "EncryptionService",
]
