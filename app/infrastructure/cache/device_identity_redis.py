"""Redis-backed device-local identity store. Records are Fernet-encrypted JSON."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from redis.exceptions import RedisError

from app.application.exceptions import TransportFailureError
from app.domain.models.identity import DeviceLocalIdentity
from app.infrastructure.cache.redis_client import RedisClient
from app.security.encryption import EncryptionService
from app.security.exceptions import EncryptionError

logger = logging.getLogger(__name__)

DEVICE_IDENTITY_PREFIX = "device_identity:"


def _key(device_id: str) -> str:
    return f"{DEVICE_IDENTITY_PREFIX}{device_id}"


def _to_record(identity: DeviceLocalIdentity) -> Dict[str, Any]:
    return {
        "identity_id": identity.identity_id,
        "first_name": identity.first_name,
        "last_name": identity.last_name,
        "phone": identity.phone,
        "enrolled_at": identity.enrolled_at.isoformat() if identity.enrolled_at else None,
    }


def _from_record(record: Dict[str, Any]) -> DeviceLocalIdentity:
    enrolled_at = record.get("enrolled_at")
    return DeviceLocalIdentity(
        identity_id=record["identity_id"],
        first_name=record.get("first_name") or "",
        last_name=record.get("last_name") or "",
        phone=record.get("phone"),
        enrolled_at=datetime.fromisoformat(enrolled_at) if enrolled_at else None,
    )


class RedisDeviceIdentityStore:
    """Implements DeviceIdentityStore. Name and phone never reach Redis in clear text."""

    def __init__(
        self,
        redis_client: RedisClient,
        encryption: EncryptionService,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._redis = redis_client
        self._encryption = encryption
        self._ttl = ttl_seconds

    async def get(self, device_id: str) -> Optional[DeviceLocalIdentity]:
        """An unreadable record (wrong key, corrupt) is dropped and treated as absent."""
        try:
            token = await self._redis.get(_key(device_id))
        except RedisError as e:
            raise TransportFailureError(f"Device identity lookup failed: {e}") from e
        if token is None:
            return None
        try:
            return _from_record(self._encryption.decrypt_json(token))
        except (EncryptionError, KeyError, ValueError) as e:
            logger.warning("device_identity_unreadable", extra={"error": str(e)})
            await self.clear(device_id)
            return None

    async def save(self, device_id: str, identity: DeviceLocalIdentity) -> None:
        token = self._encryption.encrypt_json(_to_record(identity))
        try:
            await self._redis.set(_key(device_id), token, ttl=self._ttl)
        except RedisError as e:
            raise TransportFailureError(f"Device identity could not be saved: {e}") from e
        logger.info("device_identity_saved", extra={"identity_id": identity.identity_id})

    async def clear(self, device_id: str) -> None:
        try:
            await self._redis.delete_key(_key(device_id))
        except RedisError as e:
            raise TransportFailureError(f"Device identity could not be cleared: {e}") from e
        logger.info("device_identity_cleared")
