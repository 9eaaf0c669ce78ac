"""Fixtures for unit tests built on the in-memory fakes."""

import logging

import pytest

from app.application.media_gateway import MediaUploadGateway
from app.application.submission_orchestrator import SubmissionOrchestrator
from app.capture.audio import AudioCaptureController
from app.capture.geolocation import GeolocationCaptureController
from app.capture.image import ImageCaptureService
from app.capture.remote import RemoteMicrophone, RemotePositionSensor
from app.domain.models.media import default_policies
from app.identity.resolver import IdentityResolver
from app.identity.session_reconciler import SessionReconciler
from app.observability.metrics import MetricsCollector
from tests.unit.fakes import (
    FakeAuthProvider,
    FakeDeviceStore,
    FakeReportRepository,
    FakeStorage,
    PassthroughCompressor,
)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def repository():
    return FakeReportRepository()


@pytest.fixture
def device_store():
    return FakeDeviceStore()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def microphone():
    return RemoteMicrophone()


@pytest.fixture
def sensor():
    return RemotePositionSensor()


@pytest.fixture
def gateway(storage):
    counter = iter(range(1_700_000_000_000, 1_800_000_000_000))
    return MediaUploadGateway(storage, policies=default_policies(), clock=lambda: next(counter))


@pytest.fixture
async def reconciler():
    r = SessionReconciler(FakeAuthProvider())
    await r.initialize()
    return r


@pytest.fixture
def orchestrator(microphone, sensor, gateway, repository, device_store, reconciler, metrics):
    return SubmissionOrchestrator(
        audio=AudioCaptureController(microphone, max_duration_seconds=3, tick_seconds=0.01),
        geolocation=GeolocationCaptureController(sensor, timeout_seconds=0.2),
        images=ImageCaptureService(PassthroughCompressor()),
        identity_resolver=IdentityResolver(reconciler, device_store),
        media_gateway=gateway,
        repository=repository,
        logger=logging.getLogger("test.orchestrator"),
        device_id="kiosk-1",
        metrics=metrics,
    )
