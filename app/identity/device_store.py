"""Device-local identity store protocol. Infrastructure implements it."""

from typing import Optional, Protocol

from app.domain.models.identity import DeviceLocalIdentity


class DeviceIdentityStore(Protocol):
    """Identity enrolled on one device, keyed by device id."""

    async def get(self, device_id: str) -> Optional[DeviceLocalIdentity]:
        ...

    async def save(self, device_id: str, identity: DeviceLocalIdentity) -> None:
        ...

    async def clear(self, device_id: str) -> None:
        ...
