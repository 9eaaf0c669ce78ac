"""Identity models: server session profile, device-local identity, resolved submitter."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class IdentitySource(str, Enum):
    SESSION = "session"
    DEVICE_LOCAL = "device_local"


@dataclass(frozen=True)
class UserProfile:
    """Profile row loaded for a server-authenticated account."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    commune_id: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    """Server-issued session. Exists before (and independently of) the profile."""

    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view of the session reconciler. has_session is the source of truth."""

    has_session: bool
    user_id: Optional[str] = None
    profile: Optional[UserProfile] = None


@dataclass(frozen=True)
class DeviceLocalIdentity:
    """Identity enrolled and stored only on the submitting device (voice enrollment)."""

    identity_id: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    enrolled_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class SubmitterIdentity:
    """Identity attached to a report. Fields all come from a single source."""

    source: IdentitySource
    name: Optional[str]
    phone: Optional[str]
    commune_id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Unresolved:
    """Neither a device-local identity nor a loaded session profile is present."""

    reason: str = "no identity source"


UNRESOLVED = Unresolved()

ResolvedIdentity = Union[SubmitterIdentity, Unresolved]
