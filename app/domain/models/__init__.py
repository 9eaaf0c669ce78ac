"""Domain models. Pure business entities."""

from app.domain.models.identity import (
    UNRESOLVED,
    AuthSession,
    DeviceLocalIdentity,
    IdentitySource,
    ResolvedIdentity,
    SessionSnapshot,
    SubmitterIdentity,
    Unresolved,
    UserProfile,
)
from app.domain.models.media import (
    AUDIO_MEDIA_TYPES,
    IMAGE_MEDIA_TYPES,
    MediaKind,
    MediaPolicy,
    default_policies,
    extension_for,
    normalize_media_type,
)
from app.domain.models.report import (
    AudioAsset,
    ImageAsset,
    Position,
    PositionSource,
    ReportDraft,
    ReportPayload,
    ReportPriority,
    ReportStatus,
    ReportType,
    StoredReport,
)

__all__ = [
    "AUDIO_MEDIA_TYPES",
    "IMAGE_MEDIA_TYPES",
    "UNRESOLVED",
    "AudioAsset",
    "AuthSession",
    "DeviceLocalIdentity",
    "IdentitySource",
    "ImageAsset",
    "MediaKind",
    "MediaPolicy",
    "Position",
    "PositionSource",
    "ReportDraft",
    "ReportPayload",
    "ReportPriority",
    "ReportStatus",
    "ReportType",
    "ResolvedIdentity",
    "SessionSnapshot",
    "StoredReport",
    "SubmitterIdentity",
    "Unresolved",
    "UserProfile",
    "default_policies",
    "extension_for",
    "normalize_media_type",
]
