"""SupabaseStorage against an httpx mock transport."""

import httpx
import pytest

from app.application.exceptions import DestinationMissingError, TransportFailureError
from app.infrastructure.storage.supabase_storage import SupabaseStorage

BASE_URL = "https://project.supabase.test/"


def _storage(handler) -> tuple[SupabaseStorage, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseStorage(client, BASE_URL, "anon-key"), client


async def test_upload_sends_object_with_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"Key": "report-audio/records/a.webm"})

    storage, client = _storage(handler)
    async with client:
        await storage.upload("report-audio", "records/a.webm", b"voice", "audio/webm")

    assert seen["method"] == "POST"
    assert seen["url"] == "https://project.supabase.test/storage/v1/object/report-audio/records/a.webm"
    assert seen["headers"]["x-upsert"] == "false"
    assert seen["headers"]["cache-control"] == "max-age=3600"
    assert seen["headers"]["content-type"] == "audio/webm"
    assert seen["headers"]["apikey"] == "anon-key"
    assert seen["headers"]["authorization"] == "Bearer anon-key"
    assert seen["body"] == b"voice"


def test_public_url():
    storage = SupabaseStorage(httpx.AsyncClient(), BASE_URL, "k")
    assert (
        storage.public_url("report-images", "reports/x.jpg")
        == "https://project.supabase.test/storage/v1/object/public/report-images/reports/x.jpg"
    )


@pytest.mark.parametrize(
    "status,body",
    [
        (404, {"message": "Object not found"}),
        (400, {"statusCode": "404", "error": "Bucket not found", "message": "Bucket not found"}),
    ],
)
async def test_missing_bucket_maps_to_destination_missing(status, body):
    storage, client = _storage(lambda request: httpx.Response(status, json=body))
    async with client:
        with pytest.raises(DestinationMissingError) as exc_info:
            await storage.upload("report-images", "reports/x.jpg", b"img", "image/jpeg")
    assert exc_info.value.destination == "report-images"


async def test_server_error_maps_to_transport_failure():
    storage, client = _storage(lambda request: httpx.Response(500, text="internal error"))
    async with client:
        with pytest.raises(TransportFailureError) as exc_info:
            await storage.upload("report-audio", "records/a.webm", b"voice", "audio/webm")
    assert exc_info.value.status_code == 500


async def test_duplicate_object_is_transport_failure():
    storage, client = _storage(
        lambda request: httpx.Response(409, json={"message": "The resource already exists"})
    )
    async with client:
        with pytest.raises(TransportFailureError) as exc_info:
            await storage.upload("report-audio", "records/a.webm", b"voice", "audio/webm")
    assert exc_info.value.status_code == 409


async def test_network_error_maps_to_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    storage, client = _storage(handler)
    async with client:
        with pytest.raises(TransportFailureError) as exc_info:
            await storage.upload("report-audio", "records/a.webm", b"voice", "audio/webm")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


async def test_remove_sends_prefixes():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json=[])

    storage, client = _storage(handler)
    async with client:
        await storage.remove("report-audio", ["records/a.webm"])

    assert seen["method"] == "DELETE"
    assert seen["url"].endswith("/storage/v1/object/report-audio")
    assert b'"prefixes"' in seen["body"]
    assert b"records/a.webm" in seen["body"]
