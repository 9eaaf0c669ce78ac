"""Fixtures for API unit tests: drafts wired to in-memory storage, repository and auth, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.application.device_sessions import DeviceSessionRegistry
from app.application.draft_registry import DraftRegistry
from app.application.media_gateway import MediaUploadGateway
from app.config.settings import AppSettings
from app.domain.models.identity import UserProfile
from app.domain.models.media import default_policies
from app.main import app
from app.observability.metrics import MetricsCollector
from tests.unit.fakes import (
    FakeAuthProvider,
    FakeDeviceStore,
    FakeReportRepository,
    FakeStorage,
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
def auth_provider():
    """Shared by every device in a test; signed out until sign-in."""
    return FakeAuthProvider(
        profile=UserProfile(id="agent-1", name="Awa Ndiaye", phone="770000000", commune_id="c-1")
    )


@pytest.fixture
def device_sessions(auth_provider):
    return DeviceSessionRegistry(lambda: auth_provider)


@pytest.fixture
def draft_registry(storage, repository, device_store, device_sessions, metrics):
    from app.api.dependencies import build_draft_factory

    settings = AppSettings(
        max_recording_seconds=3,
        recording_tick_seconds=0.2,
        geolocation_timeout_seconds=0.5,
    )
    gateway = MediaUploadGateway(storage, policies=default_policies())
    return DraftRegistry(
        build_draft_factory(settings, gateway, repository, device_store, device_sessions, metrics)
    )


@pytest.fixture
def app_with_overrides(draft_registry, device_store, device_sessions, metrics):
    """App with drafts, identity store, sessions and metrics overridden for testing."""
    from app.api import dependencies

    app.dependency_overrides[dependencies.get_draft_registry] = lambda: draft_registry
    app.dependency_overrides[dependencies.get_device_store] = lambda: device_store
    app.dependency_overrides[dependencies.get_device_sessions] = lambda: device_sessions
    app.dependency_overrides[dependencies.get_metrics] = lambda: metrics
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def device_headers():
    return {"X-Device-ID": "kiosk-1"}
