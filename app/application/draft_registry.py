"""In-process registry of open drafts, one orchestrator per draft, owned by a device."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from app.application.exceptions import DraftNotFoundError
from app.application.submission_orchestrator import SubmissionOrchestrator, SubmissionState
from app.capture.remote import RemoteMicrophone, RemotePositionSensor
from app.security.device_context import DeviceContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_DRAFTS_PER_DEVICE = 3
DEFAULT_IDLE_TTL_SECONDS = 1800.0


@dataclass
class DraftEntry:
    device_id: str
    orchestrator: SubmissionOrchestrator
    microphone: RemoteMicrophone
    sensor: RemotePositionSensor
    last_used: float = field(default_factory=time.monotonic)

    @property
    def draft_id(self) -> str:
        return self.orchestrator.draft_id


DraftFactory = Callable[[str], Awaitable[DraftEntry]]


class DraftRegistry:
    """
    open() builds a draft through the factory; get() enforces device ownership.
    Drafts live in memory only and are lost on restart.

    Each open() evicts drafts idle for longer than idle_ttl_seconds, then the
    device's least recently used drafts beyond max_drafts_per_device. A draft
    that is submitting is never evicted.
    """

    def __init__(
        self,
        factory: DraftFactory,
        max_drafts_per_device: int = DEFAULT_MAX_DRAFTS_PER_DEVICE,
        idle_ttl_seconds: float = DEFAULT_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._max_per_device = max_drafts_per_device
        self._idle_ttl = idle_ttl_seconds
        self._clock = clock
        self._drafts: dict[str, DraftEntry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._drafts)

    async def open(self, device_id: str) -> DraftEntry:
        entry = await self._factory(device_id)
        entry.last_used = self._clock()
        async with self._lock:
            evicted = self._select_evictions(device_id)
            for stale in evicted:
                self._drafts.pop(stale.draft_id, None)
            self._drafts[entry.draft_id] = entry
        for stale in evicted:
            await stale.orchestrator.reset()
        if evicted:
            logger.info("drafts_evicted", extra={"count": len(evicted)})
        logger.info("draft_opened", extra={"draft_id": entry.draft_id})
        return entry

    def get(self, draft_id: str, device_id: str) -> DraftEntry:
        """Raises DraftNotFoundError, or DeviceOwnershipError for another device's draft."""
        entry = self._drafts.get(draft_id)
        if entry is None:
            raise DraftNotFoundError(f"Draft '{draft_id}' not found", draft_id=draft_id)
        DeviceContext.validate_access(entry.device_id, device_id)
        entry.last_used = self._clock()
        return entry

    async def discard(self, draft_id: str, device_id: str) -> None:
        """Reset the orchestrator (fails while submitting) and forget the draft."""
        entry = self.get(draft_id, device_id)
        await entry.orchestrator.reset()
        async with self._lock:
            self._drafts.pop(draft_id, None)
        logger.info("draft_discarded", extra={"draft_id": draft_id})

    async def close_all(self) -> None:
        async with self._lock:
            entries = list(self._drafts.values())
            self._drafts.clear()
        for entry in entries:
            if entry.orchestrator.state != SubmissionState.SUBMITTING:
                await entry.orchestrator.reset()
        logger.info("drafts_closed", extra={"count": len(entries)})

    def _select_evictions(self, device_id: str) -> list[DraftEntry]:
        now = self._clock()
        evictable = [
            entry
            for entry in self._drafts.values()
            if entry.orchestrator.state != SubmissionState.SUBMITTING
        ]
        idle = [entry for entry in evictable if now - entry.last_used > self._idle_ttl]
        own = sorted(
            (
                entry
                for entry in evictable
                if entry.device_id == device_id
                and now - entry.last_used <= self._idle_ttl
            ),
            key=lambda entry: entry.last_used,
        )
        excess = len(own) - (self._max_per_device - 1)
        return idle + own[: max(excess, 0)]
