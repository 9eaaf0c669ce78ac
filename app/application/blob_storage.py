"""Blob storage protocol. Application layer depends on this; infrastructure implements it."""

from typing import Protocol


class BlobStorage(Protocol):
    """
    Named destinations (buckets) holding uploaded media.
    Implementations raise DestinationMissingError when the bucket does not exist
    and TransportFailureError for any other backend/network failure.
    """

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
    ) -> None:
        """Store content at bucket/path. Never overwrites an existing object."""
        ...

    def public_url(self, bucket: str, path: str) -> str:
        """Publicly retrievable URL for bucket/path."""
        ...

    async def remove(self, bucket: str, paths: list[str]) -> None:
        """Delete objects from bucket."""
        ...
