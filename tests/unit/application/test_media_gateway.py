"""MediaUploadGateway tests: type normalization/defaulting, ceilings, paths, storage errors, discard."""

import pytest

from app.application.exceptions import DestinationMissingError, TransportFailureError
from app.application.media_gateway import MediaBlob, MediaUploadGateway
from app.domain.exceptions import (
    FileTooLargeError,
    InvalidMediaTypeError,
    MissingRequiredFieldsError,
)
from app.domain.models.media import MediaKind, default_policies
from tests.unit.fakes import FakeStorage

TS = 1_700_000_000_123


@pytest.fixture
def fixed_gateway(storage):
    return MediaUploadGateway(storage, clock=lambda: TS)


async def test_audio_with_codec_parameters_is_accepted(fixed_gateway, storage):
    uploaded = await fixed_gateway.upload(
        MediaBlob(b"opus-frames", "audio/webm;codecs=opus"), MediaKind.AUDIO
    )
    assert uploaded.media_type == "audio/webm"
    assert uploaded.bucket == "report-audio"
    assert uploaded.path == f"records/temp-{TS}-{TS}.webm"
    assert uploaded.url == f"https://storage.test/public/report-audio/records/temp-{TS}-{TS}.webm"
    assert storage.objects[("report-audio", uploaded.path)] == (b"opus-frames", "audio/webm")


async def test_owner_id_used_in_path(fixed_gateway):
    uploaded = await fixed_gateway.upload(
        MediaBlob(b"img", "image/png"), MediaKind.IMAGE, owner_id="report-42"
    )
    assert uploaded.path == f"reports/report-42-{TS}.png"


async def test_missing_audio_type_defaults_to_webm(fixed_gateway):
    uploaded = await fixed_gateway.upload(MediaBlob(b"raw", None), MediaKind.AUDIO)
    assert uploaded.media_type == "audio/webm"


async def test_unlisted_audio_subtype_defaults_to_webm(fixed_gateway):
    uploaded = await fixed_gateway.upload(MediaBlob(b"raw", "audio/mp4"), MediaKind.AUDIO)
    assert uploaded.media_type == "audio/webm"


async def test_non_audio_type_for_audio_is_rejected(fixed_gateway, storage):
    with pytest.raises(InvalidMediaTypeError):
        await fixed_gateway.upload(MediaBlob(b"raw", "video/mp4"), MediaKind.AUDIO)
    assert storage.objects == {}


async def test_image_type_outside_whitelist_rejected(fixed_gateway):
    with pytest.raises(InvalidMediaTypeError) as exc_info:
        await fixed_gateway.upload(MediaBlob(b"gif", "image/gif"), MediaKind.IMAGE)
    assert "image/gif" in exc_info.value.message


async def test_missing_image_type_rejected(fixed_gateway):
    with pytest.raises(InvalidMediaTypeError):
        await fixed_gateway.upload(MediaBlob(b"img", ""), MediaKind.IMAGE)


async def test_size_ceiling_per_kind(storage):
    gateway = MediaUploadGateway(
        storage,
        policies=default_policies(audio_max_bytes=10, image_max_bytes=5),
        clock=lambda: TS,
    )
    await gateway.upload(MediaBlob(b"x" * 10, "audio/wav"), MediaKind.AUDIO)
    with pytest.raises(FileTooLargeError):
        await gateway.upload(MediaBlob(b"x" * 11, "audio/wav"), MediaKind.AUDIO)
    with pytest.raises(FileTooLargeError):
        await gateway.upload(MediaBlob(b"x" * 6, "image/jpeg"), MediaKind.IMAGE)


async def test_empty_blob_is_missing(fixed_gateway):
    with pytest.raises(MissingRequiredFieldsError):
        await fixed_gateway.upload(MediaBlob(b"", "audio/webm"), MediaKind.AUDIO)


async def test_missing_bucket_surfaces_destination_missing():
    gateway = MediaUploadGateway(FakeStorage(buckets=()), clock=lambda: TS)
    with pytest.raises(DestinationMissingError) as exc_info:
        await gateway.upload(MediaBlob(b"a", "audio/webm"), MediaKind.AUDIO)
    assert exc_info.value.destination == "report-audio"


async def test_transport_failure_passes_through(fixed_gateway, storage):
    storage.fail_with = TransportFailureError("connection reset")
    with pytest.raises(TransportFailureError):
        await fixed_gateway.upload(MediaBlob(b"a", "audio/webm"), MediaKind.AUDIO)


async def test_discard_removes_object(fixed_gateway, storage):
    uploaded = await fixed_gateway.upload(MediaBlob(b"a", "audio/ogg"), MediaKind.AUDIO)
    assert await fixed_gateway.discard(uploaded) is True
    assert storage.objects == {}


async def test_discard_failure_is_reported_not_raised(fixed_gateway, storage):
    uploaded = await fixed_gateway.upload(MediaBlob(b"a", "audio/ogg"), MediaKind.AUDIO)

    async def broken_remove(bucket, paths):
        raise TransportFailureError("delete failed")

    storage.remove = broken_remove
    assert await fixed_gateway.discard(uploaded) is False
