"""Supabase Storage client over httpx. Implements BlobStorage."""

import logging
from urllib.parse import quote

import httpx

from app.application.exceptions import DestinationMissingError, TransportFailureError

logger = logging.getLogger(__name__)

CACHE_CONTROL_SECONDS = 3600
_MISSING_BUCKET_HINTS = ("bucket not found", "not found", "does not exist")


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class SupabaseStorage:
    """
    POST /storage/v1/object/{bucket}/{path} with upsert disabled.
    404 or a "bucket not found" style message -> DestinationMissingError,
    every other failure -> TransportFailureError.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str, api_key: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    def _object_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/{quote(bucket)}/{quote(path)}"

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{quote(bucket)}/{quote(path)}"

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> None:
        headers = {
            **self._headers(),
            "Content-Type": content_type,
            "cache-control": f"max-age={CACHE_CONTROL_SECONDS}",
            "x-upsert": "false",
        }
        try:
            response = await self._http.post(
                self._object_url(bucket, path), content=content, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("storage_upload_transport_error", extra={"bucket": bucket, "error": str(e)})
            raise TransportFailureError(f"Upload failed: {e.__class__.__name__}") from e
        self._raise_for_status(response, bucket, "Upload")

    async def remove(self, bucket: str, paths: list[str]) -> None:
        try:
            response = await self._http.request(
                "DELETE",
                f"{self._base_url}/storage/v1/object/{quote(bucket)}",
                json={"prefixes": paths},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise TransportFailureError(f"Delete failed: {e.__class__.__name__}") from e
        self._raise_for_status(response, bucket, "Delete")

    def _raise_for_status(self, response: httpx.Response, bucket: str, action: str) -> None:
        if response.is_success:
            return
        message = _error_text(response)
        lowered = message.lower()
        if response.status_code == 404 or any(hint in lowered for hint in _MISSING_BUCKET_HINTS):
            logger.error("storage_bucket_missing", extra={"bucket": bucket})
            raise DestinationMissingError(
                f"Storage bucket '{bucket}' does not exist. Create it in the storage backend.",
                destination=bucket,
            )
        logger.error(
            "storage_request_failed",
            extra={"bucket": bucket, "status_code": response.status_code, "error": message},
        )
        raise TransportFailureError(
            f"{action} failed: {message}", status_code=response.status_code
        )
