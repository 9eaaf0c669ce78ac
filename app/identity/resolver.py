"""Identity resolution at submission time. Device-local identity always wins."""

import logging
from typing import Optional

from app.domain.models.identity import (
    UNRESOLVED,
    DeviceLocalIdentity,
    IdentitySource,
    ResolvedIdentity,
    SessionSnapshot,
    SubmitterIdentity,
    Unresolved,
)
from app.identity.device_store import DeviceIdentityStore
from app.identity.session_reconciler import SessionReconciler

logger = logging.getLogger(__name__)


def resolve_identity(
    session: SessionSnapshot,
    device_identity: Optional[DeviceLocalIdentity],
) -> ResolvedIdentity:
    """
    Precedence:
    1. active device-local identity supplies name, phone and user id (commune stays None);
    2. otherwise a session with a loaded profile supplies every field;
    3. otherwise UNRESOLVED.
    Fields from the two sources are never combined.
    """
    if device_identity is not None:
        return SubmitterIdentity(
            source=IdentitySource.DEVICE_LOCAL,
            name=device_identity.display_name or None,
            phone=device_identity.phone or None,
            commune_id=None,
            user_id=device_identity.identity_id,
        )
    if session.has_session and session.profile is not None:
        profile = session.profile
        return SubmitterIdentity(
            source=IdentitySource.SESSION,
            name=profile.name or None,
            phone=profile.phone or None,
            commune_id=profile.commune_id,
            user_id=profile.id,
        )
    if session.has_session:
        return Unresolved(reason="session profile not loaded")
    return UNRESOLVED


class IdentityResolver:
    """Reads the reconciler snapshot and the device store at submission time."""

    def __init__(
        self,
        reconciler: Optional[SessionReconciler],
        device_store: Optional[DeviceIdentityStore],
    ) -> None:
        self._reconciler = reconciler
        self._device_store = device_store

    async def resolve(self, device_id: Optional[str]) -> ResolvedIdentity:
        device_identity = None
        if self._device_store is not None and device_id:
            device_identity = await self._device_store.get(device_id)
        if self._reconciler is not None:
            session = self._reconciler.snapshot()
        else:
            session = SessionSnapshot(has_session=False)
        identity = resolve_identity(session, device_identity)
        if isinstance(identity, Unresolved):
            logger.info("identity_unresolved", extra={"reason": identity.reason})
        else:
            logger.info("identity_resolved", extra={"source": identity.source.value})
        return identity
