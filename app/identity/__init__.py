"""Identity layer: session reconciliation, device-local identity, submitter resolution."""

from app.identity.device_store import DeviceIdentityStore
from app.identity.resolver import IdentityResolver, resolve_identity
from app.identity.session_reconciler import (
    AuthEvent,
    AuthProvider,
    ReconcilerState,
    SessionReconciler,
)

__all__ = [
    "AuthEvent",
    "AuthProvider",
    "DeviceIdentityStore",
    "IdentityResolver",
    "ReconcilerState",
    "SessionReconciler",
    "resolve_identity",
]
