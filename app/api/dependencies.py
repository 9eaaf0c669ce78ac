"""FastAPI dependency injection: storage, repository, identity, draft registry, device id."""

import logging
from typing import Annotated, Optional

import httpx
from fastapi import Depends, Request

from app.application.device_sessions import DeviceSessionRegistry
from app.application.draft_registry import DraftEntry, DraftFactory, DraftRegistry
from app.application.media_gateway import MediaUploadGateway
from app.application.report_repository import ReportRepository
from app.application.submission_orchestrator import SubmissionOrchestrator
from app.capture.audio import AudioCaptureController
from app.capture.geolocation import GeolocationCaptureController
from app.capture.image import ImageCaptureService, PillowImageCompressor
from app.capture.remote import RemoteMicrophone, RemotePositionSensor
from app.config.settings import AppSettings, get_settings
from app.domain.models.media import default_policies
from app.identity.device_store import DeviceIdentityStore
from app.identity.resolver import IdentityResolver
from app.infrastructure.auth.supabase_auth import SupabaseAuthProvider
from app.infrastructure.cache.device_identity_redis import RedisDeviceIdentityStore
from app.infrastructure.cache.redis_client import RedisClient
from app.infrastructure.database.report_repository_db import DbReportRepository
from app.infrastructure.database.session import AsyncSessionLocal
from app.infrastructure.storage.supabase_storage import SupabaseStorage
from app.observability.metrics import MetricsCollector
from app.security.encryption import EncryptionService

_http_client: httpx.AsyncClient | None = None
_redis_client: RedisClient | None = None
_metrics: MetricsCollector | None = None
_media_gateway: MediaUploadGateway | None = None
_report_repository: ReportRepository | None = None
_device_store: DeviceIdentityStore | None = None
_device_sessions: DeviceSessionRegistry | None = None
_draft_registry: DraftRegistry | None = None


def get_http_client() -> httpx.AsyncClient:
    """Return singleton httpx client shared by storage and auth."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=get_settings().http_timeout_seconds)
    return _http_client


def get_redis_client() -> RedisClient:
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


def get_metrics() -> MetricsCollector:
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_media_gateway() -> MediaUploadGateway:
    global _media_gateway
    if _media_gateway is None:
        settings = get_settings()
        storage = SupabaseStorage(get_http_client(), settings.supabase_url, settings.supabase_key)
        _media_gateway = MediaUploadGateway(
            storage,
            policies=default_policies(
                audio_bucket=settings.audio_bucket,
                image_bucket=settings.image_bucket,
                audio_max_bytes=settings.audio_max_bytes,
                image_max_bytes=settings.image_max_bytes,
            ),
        )
    return _media_gateway


def get_report_repository() -> ReportRepository:
    global _report_repository
    if _report_repository is None:
        _report_repository = DbReportRepository(AsyncSessionLocal)
    return _report_repository


def get_device_store() -> Optional[DeviceIdentityStore]:
    """None when no ENCRYPTION_KEY is configured: device-local identities are then disabled."""
    global _device_store
    if _device_store is None:
        settings = get_settings()
        if not settings.encryption_key:
            return None
        _device_store = RedisDeviceIdentityStore(
            get_redis_client(),
            EncryptionService(settings.encryption_key),
            ttl_seconds=settings.device_identity_ttl_seconds,
        )
    return _device_store


def get_device_sessions() -> DeviceSessionRegistry:
    global _device_sessions
    if _device_sessions is None:
        settings = get_settings()
        http = get_http_client()
        _device_sessions = DeviceSessionRegistry(
            lambda: SupabaseAuthProvider(http, settings.supabase_url, settings.supabase_key)
        )
    return _device_sessions


def build_draft_factory(
    settings: AppSettings,
    media_gateway: MediaUploadGateway,
    repository: ReportRepository,
    device_store: Optional[DeviceIdentityStore],
    device_sessions: DeviceSessionRegistry,
    metrics: Optional[MetricsCollector] = None,
) -> DraftFactory:
    """Wire one orchestrator (and its remote device adapters) per new draft."""
    logger = logging.getLogger("app.application.submission_orchestrator")

    async def build(device_id: str) -> DraftEntry:
        microphone = RemoteMicrophone(max_bytes=settings.audio_max_bytes)
        sensor = RemotePositionSensor()
        reconciler = await device_sessions.get(device_id)
        orchestrator = SubmissionOrchestrator(
            audio=AudioCaptureController(
                microphone,
                max_duration_seconds=settings.max_recording_seconds,
                tick_seconds=settings.recording_tick_seconds,
            ),
            geolocation=GeolocationCaptureController(
                sensor, timeout_seconds=settings.geolocation_timeout_seconds
            ),
            images=ImageCaptureService(
                PillowImageCompressor(settings.image_max_dimension, settings.image_quality),
                max_bytes=settings.image_max_bytes,
            ),
            identity_resolver=IdentityResolver(reconciler, device_store),
            media_gateway=media_gateway,
            repository=repository,
            logger=logger,
            device_id=device_id,
            metrics=metrics,
        )
        return DraftEntry(
            device_id=device_id,
            orchestrator=orchestrator,
            microphone=microphone,
            sensor=sensor,
        )

    return build


def get_draft_registry() -> DraftRegistry:
    global _draft_registry
    if _draft_registry is None:
        settings = get_settings()
        _draft_registry = DraftRegistry(
            build_draft_factory(
                settings,
                get_media_gateway(),
                get_report_repository(),
                get_device_store(),
                get_device_sessions(),
                get_metrics() if settings.enable_metrics else None,
            ),
            max_drafts_per_device=settings.max_drafts_per_device,
            idle_ttl_seconds=settings.draft_idle_ttl_seconds,
        )
    return _draft_registry


async def close_resources() -> None:
    """Application shutdown: drop drafts, close auth subscriptions and network clients."""
    global _http_client, _redis_client
    if _draft_registry is not None:
        await _draft_registry.close_all()
    if _device_sessions is not None:
        await _device_sessions.close_all()
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_device_id(request: Request) -> str:
    """Extract device_id from request.state (set by middleware)."""
    return request.state.device_id


def get_correlation_id(request: Request) -> str:
    """Extract correlation_id from request.state (set by middleware)."""
    return getattr(request.state, "correlation_id", "") or ""


def get_draft(
    draft_id: str,
    device_id: Annotated[str, Depends(get_device_id)],
    registry: Annotated[DraftRegistry, Depends(get_draft_registry)],
) -> DraftEntry:
    """Path draft owned by the calling device (DraftNotFoundError / DeviceOwnershipError otherwise)."""
    return registry.get(draft_id, device_id)
