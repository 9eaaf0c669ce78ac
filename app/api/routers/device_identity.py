"""Device identity API router: voice-enrolled identity stored for this device only."""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from app.api.dependencies import get_device_id, get_device_store
from app.domain.models.identity import DeviceLocalIdentity
from app.domain.schemas.report import DeviceIdentityRequest, DeviceIdentityResponse
from app.identity.device_store import DeviceIdentityStore

router = APIRouter()

def _disabled() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": "Device identities are disabled (no encryption key configured)"},
    )


def _to_response(identity: DeviceLocalIdentity) -> DeviceIdentityResponse:
    return DeviceIdentityResponse(
        identity_id=identity.identity_id,
        first_name=identity.first_name,
        last_name=identity.last_name,
        display_name=identity.display_name,
        phone=identity.phone,
        enrolled_at=identity.enrolled_at,
    )


@router.get("/", response_model=DeviceIdentityResponse)
async def get_identity(
    device_id: Annotated[str, Depends(get_device_id)],
    store: Annotated[Optional[DeviceIdentityStore], Depends(get_device_store)],
):
    if store is None:
        return _disabled()
    identity = await store.get(device_id)
    if identity is None:
        return JSONResponse(status_code=404, content={"detail": "No identity enrolled on this device"})
    return _to_response(identity)


@router.put("/", response_model=DeviceIdentityResponse)
async def enroll_identity(
    body: DeviceIdentityRequest,
    device_id: Annotated[str, Depends(get_device_id)],
    store: Annotated[Optional[DeviceIdentityStore], Depends(get_device_store)],
):
    """Replaces any identity previously enrolled on this device."""
    if store is None:
        return _disabled()
    identity = DeviceLocalIdentity(
        identity_id=str(uuid.uuid4()),
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone or None,
        enrolled_at=datetime.now(timezone.utc),
    )
    await store.save(device_id, identity)
    return _to_response(identity)


@router.delete("/", status_code=204)
async def clear_identity(
    device_id: Annotated[str, Depends(get_device_id)],
    store: Annotated[Optional[DeviceIdentityStore], Depends(get_device_store)],
):
    if store is None:
        return _disabled()
    await store.clear(device_id)
    return Response(status_code=204)
