"""Media upload gateway: per-kind policy checks, deterministic paths, public URLs."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.application.blob_storage import BlobStorage
from app.application.exceptions import ApplicationError
from app.domain.exceptions import (
    FileTooLargeError,
    InvalidMediaTypeError,
    MissingRequiredFieldsError,
)
from app.domain.models.media import (
    MediaKind,
    MediaPolicy,
    default_policies,
    extension_for,
    normalize_media_type,
)

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class MediaBlob:
    content: bytes
    media_type: Optional[str]


@dataclass(frozen=True)
class UploadedMedia:
    kind: MediaKind
    bucket: str
    path: str
    url: str
    media_type: str


class MediaUploadGateway:
    """
    upload(blob, kind, owner_id) -> UploadedMedia.
    Type check uses the normalized type (parameters dropped). Storage errors
    (DestinationMissingError, TransportFailureError) pass through unchanged.
    """

    def __init__(
        self,
        storage: BlobStorage,
        policies: Optional[dict[MediaKind, MediaPolicy]] = None,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._storage = storage
        self._policies = policies or default_policies()
        self._clock = clock

    def policy(self, kind: MediaKind) -> MediaPolicy:
        return self._policies[kind]

    def resolve_media_type(self, declared: Optional[str], kind: MediaKind) -> str:
        """
        Normalized type if whitelisted. For kinds with a default container (audio),
        a missing type or an unlisted subtype of the same top-level type falls back
        to the default. Anything else raises InvalidMediaTypeError.
        """
        policy = self._policies[kind]
        normalized = normalize_media_type(declared)
        if normalized in policy.allowed_types:
            return normalized
        if policy.default_type and (
            not normalized or normalized.startswith(f"{kind.value}/")
        ):
            logger.info(
                "media_type_defaulted",
                extra={"declared": declared, "media_type": policy.default_type},
            )
            return policy.default_type
        allowed = ", ".join(sorted(policy.allowed_types))
        raise InvalidMediaTypeError(
            f"{kind.value.capitalize()} type not allowed. Accepted types: {allowed}. "
            f"Received type: {declared or 'unknown'}"
        )

    def build_path(self, kind: MediaKind, media_type: str, owner_id: Optional[str] = None) -> str:
        """{prefix}/{owner_id or temp-<ts>}-{ts}.{ext}"""
        timestamp = self._clock()
        owner = owner_id or f"temp-{timestamp}"
        prefix = self._policies[kind].path_prefix
        return f"{prefix}/{owner}-{timestamp}.{extension_for(media_type)}"

    async def upload(
        self,
        blob: MediaBlob,
        kind: MediaKind,
        owner_id: Optional[str] = None,
    ) -> UploadedMedia:
        policy = self._policies[kind]
        if not blob.content:
            raise MissingRequiredFieldsError(f"No {kind.value} file provided", fields=(kind.value,))
        media_type = self.resolve_media_type(blob.media_type, kind)
        size = len(blob.content)
        if size > policy.max_bytes:
            raise FileTooLargeError(
                f"{kind.value.capitalize()} too large (max {policy.max_bytes / 1024 / 1024:.0f}MB). "
                f"Current size: {size / 1024 / 1024:.2f}MB",
                size_bytes=size,
                max_bytes=policy.max_bytes,
            )

        path = self.build_path(kind, media_type, owner_id)
        started = time.perf_counter()
        await self._storage.upload(policy.bucket, path, blob.content, media_type)
        url = self._storage.public_url(policy.bucket, path)
        logger.info(
            "media_uploaded",
            extra={
                "kind": kind.value,
                "bucket": policy.bucket,
                "path": path,
                "size_bytes": size,
                "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return UploadedMedia(
            kind=kind,
            bucket=policy.bucket,
            path=path,
            url=url,
            media_type=media_type,
        )

    async def discard(self, uploaded: UploadedMedia) -> bool:
        """Best-effort delete of an uploaded object. Returns False (and logs) on failure."""
        try:
            await self._storage.remove(uploaded.bucket, [uploaded.path])
        except ApplicationError as e:
            logger.warning(
                "media_discard_failed",
                extra={"bucket": uploaded.bucket, "path": uploaded.path, "error": e.message},
            )
            return False
        logger.info("media_discarded", extra={"bucket": uploaded.bucket, "path": uploaded.path})
        return True
