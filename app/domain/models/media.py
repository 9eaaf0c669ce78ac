"""Media kinds and per-destination policies (whitelists, ceilings, path prefixes)."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional


class MediaKind(str, Enum):
    AUDIO = "audio"
    IMAGE = "image"


AUDIO_MEDIA_TYPES: FrozenSet[str] = frozenset(
    {"audio/webm", "audio/mpeg", "audio/mp3", "audio/wav", "audio/ogg"}
)
IMAGE_MEDIA_TYPES: FrozenSet[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp"}
)

DEFAULT_AUDIO_MEDIA_TYPE = "audio/webm"

AUDIO_MAX_BYTES = 10 * 1024 * 1024
IMAGE_MAX_BYTES = 5 * 1024 * 1024

_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


@dataclass(frozen=True)
class MediaPolicy:
    """Upload policy for one blob-storage destination."""

    kind: MediaKind
    bucket: str
    path_prefix: str
    allowed_types: FrozenSet[str]
    max_bytes: int
    default_type: Optional[str] = None


def default_policies(
    audio_bucket: str = "report-audio",
    image_bucket: str = "report-images",
    audio_max_bytes: int = AUDIO_MAX_BYTES,
    image_max_bytes: int = IMAGE_MAX_BYTES,
) -> dict[MediaKind, MediaPolicy]:
    return {
        MediaKind.AUDIO: MediaPolicy(
            kind=MediaKind.AUDIO,
            bucket=audio_bucket,
            path_prefix="records",
            allowed_types=AUDIO_MEDIA_TYPES,
            max_bytes=audio_max_bytes,
            default_type=DEFAULT_AUDIO_MEDIA_TYPE,
        ),
        MediaKind.IMAGE: MediaPolicy(
            kind=MediaKind.IMAGE,
            bucket=image_bucket,
            path_prefix="reports",
            allowed_types=IMAGE_MEDIA_TYPES,
            max_bytes=image_max_bytes,
        ),
    }


def normalize_media_type(declared: Optional[str]) -> str:
    """Drop parameters after ';' (e.g. 'audio/webm;codecs=opus' -> 'audio/webm')."""
    if not declared:
        return ""
    return declared.split(";", 1)[0].strip().lower()


def extension_for(media_type: str) -> str:
    """File extension for a normalized media type. Falls back to the subtype."""
    if media_type in _EXTENSIONS:
        return _EXTENSIONS[media_type]
    _, _, subtype = media_type.partition("/")
    return subtype or "bin"
