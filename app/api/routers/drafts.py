"""Drafts API router: one report draft per kiosk flow, driven step by step by the front end."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse

from app.api.dependencies import get_device_id, get_draft, get_draft_registry
from app.application.draft_registry import DraftEntry, DraftRegistry
from app.application.submission_orchestrator import DraftSnapshot
from app.capture.image import ImageFile
from app.capture.ports import PermissionState, PositionReading
from app.domain.exceptions import (
    GeolocationTimeoutError,
    PermissionDeniedError,
    PositionUnavailableError,
)
from app.domain.models.report import ReportDraft
from app.domain.schemas.report import (
    AudioOut,
    CapabilityReport,
    CoordinatesRequest,
    DraftResponse,
    ErrorInfo,
    ImageOut,
    PositionErrorReport,
    PositionOut,
    ReportResponse,
    SelectTypeRequest,
)
from app.domain.validators.report_validator import Ready, validate_draft

router = APIRouter()

_POSITION_ERRORS = {
    "PERMISSION_DENIED": (PermissionDeniedError, "Location access was denied"),
    "POSITION_UNAVAILABLE": (PositionUnavailableError, "Position unavailable"),
    "TIMEOUT": (GeolocationTimeoutError, "Position request timed out"),
}


def _to_response(snapshot: DraftSnapshot) -> DraftResponse:
    ready = validate_draft(
        ReportDraft(
            report_type=snapshot.report_type,
            audio=snapshot.audio,
            position=snapshot.position,
            image=snapshot.image,
        )
    )
    audio = snapshot.audio
    position = snapshot.position
    image = snapshot.image
    report = snapshot.result
    return DraftResponse(
        draft_id=snapshot.draft_id,
        state=snapshot.state.value,
        report_type=snapshot.report_type,
        audio=AudioOut(
            media_type=audio.declared_media_type,
            size_bytes=audio.size_bytes,
            duration_seconds=audio.duration_seconds,
        )
        if audio
        else None,
        recording_elapsed_seconds=snapshot.recording_elapsed_seconds,
        recording_max_seconds=snapshot.recording_max_seconds,
        position=PositionOut(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy_meters=position.accuracy_meters,
            source=position.source.value,
        )
        if position
        else None,
        geolocation_mode=snapshot.geolocation_mode.value,
        locating=snapshot.locating,
        image=ImageOut(
            media_type=image.media_type,
            size_bytes=image.size_bytes,
            filename=image.filename,
        )
        if image
        else None,
        ready=isinstance(ready, Ready),
        error=ErrorInfo(code=snapshot.error.code.value, message=snapshot.error.message)
        if snapshot.error
        else None,
        report=ReportResponse(
            id=report.id,
            type=report.type,
            status=report.status,
            priority=report.priority,
            latitude=report.latitude,
            longitude=report.longitude,
            created_at=report.created_at,
            audio_url=report.audio_url,
            image_url=report.image_url,
            commune_id=report.commune_id,
            citizen_name=report.citizen_name,
            phone=report.phone,
            description=report.description,
            citizen_user_id=report.citizen_user_id,
        )
        if report
        else None,
    )


def _draft_response(entry: DraftEntry) -> DraftResponse:
    return _to_response(entry.orchestrator.snapshot())


@router.post("/", response_model=DraftResponse, status_code=201)
async def open_draft(
    device_id: Annotated[str, Depends(get_device_id)],
    registry: Annotated[DraftRegistry, Depends(get_draft_registry)],
):
    entry = await registry.open(device_id)
    return _draft_response(entry)


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft_state(entry: Annotated[DraftEntry, Depends(get_draft)]):
    return _draft_response(entry)


@router.delete("/{draft_id}", status_code=204)
async def discard_draft(
    draft_id: str,
    device_id: Annotated[str, Depends(get_device_id)],
    registry: Annotated[DraftRegistry, Depends(get_draft_registry)],
):
    await registry.discard(draft_id, device_id)
    return Response(status_code=204)


@router.put("/{draft_id}/type", response_model=DraftResponse)
async def select_type(
    body: SelectTypeRequest,
    entry: Annotated[DraftEntry, Depends(get_draft)],
):
    entry.orchestrator.select_type(body.type)
    return _draft_response(entry)


@router.post("/{draft_id}/capabilities", response_model=DraftResponse)
async def report_capabilities(
    body: CapabilityReport,
    entry: Annotated[DraftEntry, Depends(get_draft)],
):
    """Front end reports what the browser exposes before the user starts recording."""
    entry.microphone.report_capability(
        body.microphone_supported, PermissionState(body.microphone_permission)
    )
    entry.sensor.report_capability(body.geolocation_supported)
    return _draft_response(entry)


@router.post("/{draft_id}/recording/start", response_model=DraftResponse)
async def start_recording(entry: Annotated[DraftEntry, Depends(get_draft)]):
    """Device errors (denied, unsupported) come back in the `error` field, not as HTTP errors."""
    await entry.orchestrator.start_recording()
    return _draft_response(entry)


@router.post("/{draft_id}/recording/chunks", status_code=202)
async def push_audio_chunk(
    request: Request,
    entry: Annotated[DraftEntry, Depends(get_draft)],
    content_type: Annotated[Optional[str], Header()] = None,
):
    chunk = await request.body()
    entry.microphone.push(chunk, content_type)
    return {"received_bytes": len(chunk)}


@router.post("/{draft_id}/recording/stop", response_model=DraftResponse)
async def stop_recording(entry: Annotated[DraftEntry, Depends(get_draft)]):
    await entry.orchestrator.stop_recording()
    return _draft_response(entry)


@router.post("/{draft_id}/position/fix", response_model=DraftResponse)
async def report_position_fix(
    body: CoordinatesRequest,
    entry: Annotated[DraftEntry, Depends(get_draft)],
):
    """Result of the device's own position request (auto capture)."""
    accepted = entry.sensor.report(
        PositionReading(
            latitude=body.latitude,
            longitude=body.longitude,
            accuracy_meters=body.accuracy_meters,
        )
    )
    if not accepted:
        return JSONResponse(
            status_code=409,
            content={"detail": "No position request is pending for this draft"},
        )
    await entry.orchestrator.settle_location()
    return _draft_response(entry)


@router.post("/{draft_id}/position/error", response_model=DraftResponse)
async def report_position_error(
    body: PositionErrorReport,
    entry: Annotated[DraftEntry, Depends(get_draft)],
):
    error_class, default_message = _POSITION_ERRORS[body.code]
    accepted = entry.sensor.report_error(error_class(body.message or default_message))
    if not accepted:
        return JSONResponse(
            status_code=409,
            content={"detail": "No position request is pending for this draft"},
        )
    await entry.orchestrator.settle_location()
    return _draft_response(entry)


@router.put("/{draft_id}/position/manual", response_model=DraftResponse)
async def set_manual_position(
    body: CoordinatesRequest,
    entry: Annotated[DraftEntry, Depends(get_draft)],
):
    entry.orchestrator.set_manual_position(body.latitude, body.longitude, body.accuracy_meters)
    return _draft_response(entry)


@router.post("/{draft_id}/position/retry", response_model=DraftResponse)
async def retry_position(entry: Annotated[DraftEntry, Depends(get_draft)]):
    entry.orchestrator.retry_location()
    return _draft_response(entry)


@router.get("/{draft_id}/position/permission")
async def position_permission(entry: Annotated[DraftEntry, Depends(get_draft)]):
    state = await entry.orchestrator.location_permission()
    return {"state": state.value}


@router.put("/{draft_id}/image", response_model=DraftResponse)
async def attach_image(
    request: Request,
    entry: Annotated[DraftEntry, Depends(get_draft)],
    content_type: Annotated[Optional[str], Header()] = None,
    x_filename: Annotated[Optional[str], Header(alias="X-Filename")] = None,
):
    """Raw image body. A rejected file leaves the draft untouched and sets `error`."""
    content = await request.body()
    await entry.orchestrator.attach_image(
        ImageFile(content=content, media_type=content_type or "", filename=x_filename)
    )
    return _draft_response(entry)


@router.delete("/{draft_id}/image", response_model=DraftResponse)
async def remove_image(entry: Annotated[DraftEntry, Depends(get_draft)]):
    entry.orchestrator.remove_image()
    return _draft_response(entry)


@router.post("/{draft_id}/submit", response_model=DraftResponse)
async def submit_draft(entry: Annotated[DraftEntry, Depends(get_draft)]):
    """Blocking and failure errors are raised and mapped by the app exception handlers."""
    report = await entry.orchestrator.submit()
    if report is None:
        return JSONResponse(
            status_code=409,
            content={"detail": "Submission already in progress", "code": "INVALID_TRANSITION"},
        )
    return _draft_response(entry)
