"""Domain model for incident reports and drafts. Pure business semantics. No ORM or infrastructure."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ReportType(str, Enum):
    """Incident categories a citizen can pick."""

    VOIRIE = "voirie"
    ECLAIRAGE = "eclairage"
    EAU = "eau"
    DECHETS = "dechets"
    SECURITE = "securite"
    ASSAINISSEMENT = "assainissement"
    ESPACES_VERTS = "espaces_verts"
    TRANSPORT = "transport"
    AUTRE = "autre"


class ReportStatus(str, Enum):
    """Lifecycle status. This core only creates PENDING rows (database default)."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ReportPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class PositionSource(str, Enum):
    AUTO = "auto"  # device sensor
    MANUAL = "manual"  # user-placed


@dataclass(frozen=True)
class AudioAsset:
    """Sealed voice clip. declared_media_type may carry parameters (e.g. codecs=opus)."""

    content: bytes
    declared_media_type: str
    duration_seconds: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ImageAsset:
    """Accepted (already validated and compressed) photo."""

    content: bytes
    media_type: str
    size_bytes: int
    filename: Optional[str] = None


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    source: PositionSource = PositionSource.AUTO


@dataclass
class ReportDraft:
    """
    In-progress report. Owned by the submission orchestrator; controllers never
    mutate it directly.
    """

    report_type: Optional[ReportType] = None
    audio: Optional[AudioAsset] = None
    position: Optional[Position] = None
    image: Optional[ImageAsset] = None


@dataclass(frozen=True)
class ReportPayload:
    """
    Write accepted by the report repository. type/latitude/longitude are Optional
    because collaborators may call the repository directly; it re-checks them.
    """

    type: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    description: Optional[str] = None
    commune_id: Optional[str] = None
    phone: Optional[str] = None
    citizen_name: Optional[str] = None
    citizen_user_id: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class StoredReport:
    """Persisted report row as returned by the repository."""

    id: str
    type: str
    status: ReportStatus
    priority: ReportPriority
    latitude: float
    longitude: float
    created_at: datetime
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    commune_id: Optional[str] = None
    citizen_name: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    citizen_user_id: Optional[str] = None
