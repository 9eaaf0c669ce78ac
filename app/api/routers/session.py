"""Session API router: server-authenticated session of the kiosk device."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import get_device_id, get_device_sessions
from app.application.device_sessions import DeviceSessionRegistry
from app.domain.models.identity import SessionSnapshot
from app.domain.schemas.report import ProfileOut, SessionResponse, SignInRequest

router = APIRouter()


def _to_response(snapshot: SessionSnapshot) -> SessionResponse:
    profile = snapshot.profile
    return SessionResponse(
        has_session=snapshot.has_session,
        user_id=snapshot.user_id,
        profile=ProfileOut(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            role=profile.role,
            commune_id=profile.commune_id,
            phone=profile.phone,
        )
        if profile
        else None,
    )


@router.get("/", response_model=SessionResponse)
async def get_session(
    device_id: Annotated[str, Depends(get_device_id)],
    sessions: Annotated[DeviceSessionRegistry, Depends(get_device_sessions)],
):
    reconciler = await sessions.get(device_id)
    return _to_response(reconciler.snapshot())


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in(
    body: SignInRequest,
    device_id: Annotated[str, Depends(get_device_id)],
    sessions: Annotated[DeviceSessionRegistry, Depends(get_device_sessions)],
):
    """Wrong credentials map to a single generic 401 message."""
    reconciler = await sessions.get(device_id)
    return _to_response(await reconciler.sign_in(body.email, body.password))


@router.post("/sign-out", response_model=SessionResponse)
async def sign_out(
    device_id: Annotated[str, Depends(get_device_id)],
    sessions: Annotated[DeviceSessionRegistry, Depends(get_device_sessions)],
):
    reconciler = await sessions.get(device_id)
    await reconciler.sign_out()
    return _to_response(reconciler.snapshot())
