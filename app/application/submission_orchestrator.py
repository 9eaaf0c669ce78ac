"""
Submission orchestrator. Owns one draft and drives it through
idle -> recording -> locating -> photo -> submitting -> done | failed.

Controllers report device and media problems as typed state; the orchestrator
records the latest one in `error`. submit() is the only action that raises.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from app.application.exceptions import ApplicationError, UnexpectedError
from app.application.media_gateway import MediaBlob, MediaUploadGateway, UploadedMedia
from app.application.report_repository import ReportRepository
from app.capture.audio import AudioCaptureController
from app.capture.geolocation import GeolocationCaptureController, GeolocationMode
from app.capture.image import ImageCaptureService, ImageFile
from app.capture.ports import PermissionState
from app.domain.exceptions import (
    DeviceError,
    DomainError,
    DraftNotReadyError,
    InvalidDraftTransitionError,
)
from app.domain.models.identity import ResolvedIdentity, SubmitterIdentity
from app.domain.models.media import MediaKind
from app.domain.models.report import (
    AudioAsset,
    ImageAsset,
    Position,
    ReportDraft,
    ReportPayload,
    ReportType,
    StoredReport,
)
from app.domain.validators.report_validator import (
    NotReady,
    validate_draft,
    validate_report_type,
)
from app.identity.resolver import IdentityResolver
from app.observability.failure_classifier import FailureClassifier
from app.observability.metrics import MetricsCollector

SubmissionError = Union[DomainError, ApplicationError]


class SubmissionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    LOCATING = "locating"
    PHOTO = "photo"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


_RECORDING_ALLOWED_FROM = frozenset(
    {SubmissionState.IDLE, SubmissionState.LOCATING, SubmissionState.FAILED, SubmissionState.DONE}
)


@dataclass(frozen=True)
class DraftSnapshot:
    """Read-only view of the orchestrator for the control API."""

    draft_id: str
    state: SubmissionState
    report_type: Optional[ReportType]
    audio: Optional[AudioAsset]
    recording_elapsed_seconds: int
    recording_max_seconds: int
    position: Optional[Position]
    geolocation_mode: GeolocationMode
    locating: bool
    image: Optional[ImageAsset]
    error: Optional[SubmissionError]
    result: Optional[StoredReport]


def build_report_payload(
    report_type: ReportType,
    position: Position,
    identity: ResolvedIdentity,
    audio_url: str,
    image_url: Optional[str],
) -> ReportPayload:
    """Unresolved identity leaves every citizen field empty (anonymous report)."""
    submitter = identity if isinstance(identity, SubmitterIdentity) else None
    return ReportPayload(
        type=report_type.value,
        latitude=position.latitude,
        longitude=position.longitude,
        description=None,
        commune_id=submitter.commune_id if submitter else None,
        phone=submitter.phone if submitter else None,
        citizen_name=submitter.name if submitter else None,
        citizen_user_id=submitter.user_id if submitter else None,
        audio_url=audio_url,
        image_url=image_url,
    )


class SubmissionOrchestrator:
    """
    Composes the capture controllers, the identity resolver, the media gateway
    and the report repository. Application-layer only: no HTTP, no storage client.
    """

    def __init__(
        self,
        audio: AudioCaptureController,
        geolocation: GeolocationCaptureController,
        images: ImageCaptureService,
        identity_resolver: IdentityResolver,
        media_gateway: MediaUploadGateway,
        repository: ReportRepository,
        logger: logging.Logger,
        device_id: Optional[str] = None,
        draft_id: Optional[str] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._audio = audio
        self._geolocation = geolocation
        self._images = images
        self._identity = identity_resolver
        self._gateway = media_gateway
        self._repository = repository
        self._logger = logger
        self._metrics = metrics
        self.device_id = device_id
        self.draft_id = draft_id or str(uuid.uuid4())
        self._state = SubmissionState.IDLE
        self._draft = ReportDraft()
        self._error: Optional[SubmissionError] = None
        self._result: Optional[StoredReport] = None
        self._geolocation_error: Optional[DeviceError] = None
        self._image_error: Optional[DomainError] = None

        audio.on_stopped(self._on_audio_stopped)
        audio.on_failed(self._on_audio_failed)
        geolocation.on_position(self._on_position)
        geolocation.on_error(self._on_geolocation_error)

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def draft(self) -> ReportDraft:
        return self._draft

    @property
    def error(self) -> Optional[SubmissionError]:
        return self._error

    @property
    def result(self) -> Optional[StoredReport]:
        return self._result

    def snapshot(self) -> DraftSnapshot:
        return DraftSnapshot(
            draft_id=self.draft_id,
            state=self._state,
            report_type=self._draft.report_type,
            audio=self._draft.audio,
            recording_elapsed_seconds=self._audio.elapsed_seconds,
            recording_max_seconds=self._audio.max_duration_seconds,
            position=self._draft.position,
            geolocation_mode=self._geolocation.mode,
            locating=self._geolocation.is_locating,
            image=self._draft.image,
            error=self._error,
            result=self._result,
        )

    def select_type(self, value: Union[ReportType, str]) -> ReportType:
        """Raises InvalidReportTypeError for unknown values."""
        self._guard_not_submitting("select_type")
        report_type = value if isinstance(value, ReportType) else validate_report_type(value)
        self._draft.report_type = report_type
        self._log("report_type_selected", report_type=report_type.value)
        return report_type

    async def start_recording(self) -> bool:
        """Starts the microphone and, when no position is held yet, auto geolocation."""
        if self._state not in _RECORDING_ALLOWED_FROM:
            raise InvalidDraftTransitionError(
                f"Cannot start recording while {self._state.value}"
            )
        if self._state in (SubmissionState.DONE, SubmissionState.FAILED):
            self._result = None
        started = await self._audio.start()
        if not started:
            self._error = self._audio.error
            self._log("recording_not_started", code=self._error.code.value if self._error else None)
            return False
        self._draft.audio = None
        self._error = None
        self._state = SubmissionState.RECORDING
        if self._draft.position is None:
            self._geolocation.start_auto_capture()
        self._log("recording_started")
        return True

    async def stop_recording(self) -> Optional[AudioAsset]:
        """No-op unless recording. The audio listener performs the transition."""
        if self._state != SubmissionState.RECORDING:
            return self._draft.audio
        return await self._audio.stop()

    def set_manual_position(
        self,
        latitude: float,
        longitude: float,
        accuracy_meters: Optional[float] = None,
    ) -> Position:
        """Manual placement; wins over any pending or later auto result for this draft."""
        self._guard_not_submitting("set_manual_position")
        return self._geolocation.set_manual(latitude, longitude, accuracy_meters)

    def retry_location(self) -> bool:
        self._guard_not_submitting("retry_location")
        return self._geolocation.start_auto_capture()

    async def settle_location(self) -> None:
        await self._geolocation.settle()

    async def location_permission(self) -> PermissionState:
        return await self._geolocation.check_permission()

    async def attach_image(self, file: ImageFile) -> Optional[ImageAsset]:
        """Returns None and records the error when the file is rejected; the draft stays valid."""
        self._guard_not_submitting("attach_image")
        try:
            asset = await self._images.accept(file)
        except DomainError as e:
            self._error = e
            self._image_error = e
            self._count_failure(e, "image_rejected")
            self._log("image_rejected", code=e.code.value)
            return None
        self._draft.image = asset
        if self._error is not None and self._error is self._image_error:
            self._error = None
        self._image_error = None
        return asset

    def remove_image(self) -> None:
        self._guard_not_submitting("remove_image")
        self._images.remove()
        self._draft.image = None

    async def reset(self) -> None:
        """Discard the draft and reset every controller."""
        self._guard_not_submitting("reset")
        await self._clear_draft()
        self._state = SubmissionState.IDLE
        self._error = None
        self._result = None
        self._log("draft_reset")

    async def submit(self) -> Optional[StoredReport]:
        """
        Validate, resolve identity, upload audio then image, create the report.
        Returns None if a submission is already in flight for this draft.
        Raises the blocking error (not-ready, device error) or the upload/persistence
        error verbatim; it is also kept in `error`.
        """
        if self._state == SubmissionState.SUBMITTING:
            self._log("duplicate_submit_ignored")
            if self._metrics is not None:
                self._metrics.increment("duplicate_submit_ignored")
            return None

        validation = validate_draft(self._draft)
        if isinstance(validation, NotReady):
            error = self._not_ready_error(validation)
            self._error = error
            self._log("submit_blocked", field=validation.field, code=error.code.value)
            raise error

        report_type = self._draft.report_type
        audio = self._draft.audio
        position = self._draft.position
        image = self._draft.image

        self._state = SubmissionState.SUBMITTING
        self._error = None
        if self._metrics is not None:
            self._metrics.increment("submission_started")
        started = time.perf_counter()
        uploaded: list[UploadedMedia] = []
        try:
            identity = await self._identity.resolve(self.device_id)
            audio_media = await self._upload(
                MediaBlob(audio.content, audio.declared_media_type), MediaKind.AUDIO
            )
            uploaded.append(audio_media)
            image_url = None
            if image is not None:
                image_media = await self._upload(
                    MediaBlob(image.content, image.media_type), MediaKind.IMAGE
                )
                uploaded.append(image_media)
                image_url = image_media.url
            payload = build_report_payload(
                report_type, position, identity, audio_media.url, image_url
            )
            report = await self._repository.create(payload)
        except (DomainError, ApplicationError) as e:
            await self._fail(e, uploaded)
            raise
        except Exception as e:
            wrapped = UnexpectedError(f"Unexpected error during submission: {e}")
            await self._fail(wrapped, uploaded)
            raise wrapped from e

        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        self._state = SubmissionState.DONE
        self._result = report
        await self._clear_draft()
        if self._metrics is not None:
            self._metrics.increment("submission_succeeded")
            self._metrics.observe_latency("submission_latency_ms", latency_ms)
        self._logger.info(
            "report_submitted",
            extra={
                "draft_id": self.draft_id,
                "report_id": report.id,
                "report_type": report.type,
                "has_image": image is not None,
                "latency_ms": latency_ms,
            },
        )
        return report

    async def _upload(self, blob: MediaBlob, kind: MediaKind) -> UploadedMedia:
        started = time.perf_counter()
        media = await self._gateway.upload(blob, kind, owner_id=self.draft_id)
        if self._metrics is not None:
            self._metrics.observe_latency(
                "upload_latency_ms",
                round((time.perf_counter() - started) * 1000, 2),
                stage=kind.value,
            )
        return media

    def _on_audio_stopped(self, asset: AudioAsset) -> None:
        self._draft.audio = asset
        if self._state != SubmissionState.RECORDING:
            return
        if self._draft.position is not None:
            self._state = SubmissionState.PHOTO
        else:
            self._state = SubmissionState.LOCATING
        self._log("recording_sealed", duration_seconds=asset.duration_seconds)

    def _on_audio_failed(self, error: DeviceError) -> None:
        """Recording lost; type and position stay so the user can record again."""
        self._draft.audio = None
        self._error = error
        self._count_failure(error, "recording_failed")
        if self._state == SubmissionState.RECORDING:
            self._state = SubmissionState.IDLE
        self._log("recording_failed", code=error.code.value)

    def _on_position(self, position: Position) -> None:
        self._draft.position = position
        if self._error is not None and self._error is self._geolocation_error:
            self._error = None
        if self._state == SubmissionState.LOCATING:
            self._state = SubmissionState.PHOTO
        self._log("position_acquired", source=position.source.value)

    def _on_geolocation_error(self, error: DeviceError) -> None:
        self._geolocation_error = error
        self._error = error
        self._count_failure(error, "geolocation_failed")

    def _not_ready_error(self, validation: NotReady) -> DomainError:
        if validation.field == "position" and self._geolocation.error is not None:
            return self._geolocation.error
        if validation.field == "audio" and self._audio.error is not None:
            return self._audio.error
        return DraftNotReadyError(validation.message, field=validation.field)

    async def _fail(self, error: SubmissionError, uploaded: list[UploadedMedia]) -> None:
        self._state = SubmissionState.FAILED
        self._error = error
        self._count_failure(error, "submission_failed")
        self._logger.error(
            "report_submission_failed",
            extra={
                "draft_id": self.draft_id,
                "code": error.code.value,
                "failure_category": FailureClassifier.classify(error).value,
                "error": error.message,
            },
        )
        for media in uploaded:
            await self._gateway.discard(media)

    async def _clear_draft(self) -> None:
        await self._audio.reset()
        await self._geolocation.reset()
        self._images.remove()
        self._draft = ReportDraft()
        self._geolocation_error = None
        self._image_error = None

    def _guard_not_submitting(self, action: str) -> None:
        if self._state == SubmissionState.SUBMITTING:
            raise InvalidDraftTransitionError(f"Cannot {action} while submitting")

    def _count_failure(self, error: BaseException, name: str) -> None:
        if self._metrics is not None:
            self._metrics.increment(name, category=FailureClassifier.error_code(error).value)

    def _log(self, event: str, **fields) -> None:
        self._logger.info(event, extra={"draft_id": self.draft_id, "state": self._state.value, **fields})
