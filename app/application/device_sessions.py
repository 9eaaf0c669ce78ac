"""One session reconciler per kiosk device, created and initialized on first use."""

import asyncio
import logging
from typing import Callable

from app.identity.session_reconciler import AuthProvider, SessionReconciler

logger = logging.getLogger(__name__)

AuthProviderFactory = Callable[[], AuthProvider]


class DeviceSessionRegistry:
    """Locks are per device: a slow session check only holds up its own device."""

    def __init__(self, provider_factory: AuthProviderFactory) -> None:
        self._provider_factory = provider_factory
        self._reconcilers: dict[str, SessionReconciler] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, device_id: str) -> SessionReconciler:
        reconciler = self._reconcilers.get(device_id)
        if reconciler is not None:
            return reconciler
        async with self._locks.setdefault(device_id, asyncio.Lock()):
            reconciler = self._reconcilers.get(device_id)
            if reconciler is None:
                reconciler = SessionReconciler(self._provider_factory())
                await reconciler.initialize()
                self._reconcilers[device_id] = reconciler
                logger.info("device_session_created")
            return reconciler

    async def close(self, device_id: str) -> None:
        reconciler = self._reconcilers.pop(device_id, None)
        if reconciler is not None:
            reconciler.close()

    async def close_all(self) -> None:
        reconcilers = list(self._reconcilers.values())
        self._reconcilers.clear()
        for reconciler in reconcilers:
            reconciler.close()
