"""Optional photo step: validate type/size, compress, hold the current selection."""

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

from PIL import Image, UnidentifiedImageError

from app.capture.ports import ImageCompressor
from app.domain.exceptions import (
    FileTooLargeError,
    InvalidMediaTypeError,
    MissingRequiredFieldsError,
)
from app.domain.models.media import IMAGE_MAX_BYTES, IMAGE_MEDIA_TYPES, normalize_media_type
from app.domain.models.report import ImageAsset

logger = logging.getLogger(__name__)

_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}


@dataclass(frozen=True)
class ImageFile:
    """User-selected file as received from the device."""

    content: bytes
    media_type: str
    filename: Optional[str] = None


class PillowImageCompressor:
    """Downscale to max_dimension and re-encode. Runs Pillow in a worker thread."""

    def __init__(self, max_dimension: int = 1920, quality: int = 80) -> None:
        self._max_dimension = max_dimension
        self._quality = quality

    async def compress(self, content: bytes, media_type: str) -> tuple[bytes, str]:
        return await asyncio.to_thread(self._compress, content, media_type)

    def _compress(self, content: bytes, media_type: str) -> tuple[bytes, str]:
        fmt = _PIL_FORMATS.get(media_type, "JPEG")
        out = io.BytesIO()
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.thumbnail((self._max_dimension, self._max_dimension))
                if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                options = {"optimize": True}
                if fmt in ("JPEG", "WEBP"):
                    options["quality"] = self._quality
                img.save(out, format=fmt, **options)
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidMediaTypeError("File is not a readable image") from e
        return out.getvalue(), "image/jpeg" if fmt == "JPEG" else media_type


class ImageCaptureService:
    """accept() validates then compresses; remove() clears. A draft without image is valid."""

    def __init__(
        self,
        compressor: ImageCompressor,
        max_bytes: int = IMAGE_MAX_BYTES,
        allowed_types: FrozenSet[str] = IMAGE_MEDIA_TYPES,
    ) -> None:
        self._compressor = compressor
        self._max_bytes = max_bytes
        self._allowed_types = allowed_types
        self._current: Optional[ImageAsset] = None

    @property
    def current(self) -> Optional[ImageAsset]:
        return self._current

    async def accept(self, file: ImageFile) -> ImageAsset:
        """Raises InvalidMediaTypeError / FileTooLargeError; the previous selection is kept on failure."""
        if not file.content:
            raise MissingRequiredFieldsError("No file provided", fields=("image",))
        media_type = normalize_media_type(file.media_type)
        if media_type not in self._allowed_types:
            allowed = ", ".join(sorted(self._allowed_types))
            raise InvalidMediaTypeError(
                f"File type not allowed. Accepted types: {allowed}"
            )
        size = len(file.content)
        if size > self._max_bytes:
            raise FileTooLargeError(
                f"Image too large (max {self._max_bytes / 1024 / 1024:.0f}MB). "
                f"Current size: {size / 1024 / 1024:.2f}MB",
                size_bytes=size,
                max_bytes=self._max_bytes,
            )

        content, out_type = await self._compressor.compress(file.content, media_type)
        if len(content) >= size:
            content, out_type = file.content, media_type
        asset = ImageAsset(
            content=content,
            media_type=out_type,
            size_bytes=len(content),
            filename=file.filename,
        )
        self._current = asset
        logger.info(
            "image_accepted",
            extra={"original_bytes": size, "compressed_bytes": asset.size_bytes},
        )
        return asset

    def remove(self) -> None:
        self._current = None
