"""Pydantic schemas for the capture control API. Strict validation, no DB or infrastructure."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.models.report import ReportPriority, ReportStatus, ReportType


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SelectTypeRequest(BaseModel):
    type: ReportType


class CoordinatesRequest(BaseModel):
    """Used both for manual placement and for a fix reported by the device sensor."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    accuracy_meters: Optional[float] = Field(None, ge=0.0)


class PositionErrorReport(BaseModel):
    code: Literal["PERMISSION_DENIED", "POSITION_UNAVAILABLE", "TIMEOUT"]
    message: Optional[str] = None


class CapabilityReport(BaseModel):
    """What the kiosk browser told the front end about its devices."""

    microphone_supported: bool = True
    microphone_permission: Literal["granted", "denied", "prompt"] = "prompt"
    geolocation_supported: bool = True


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class DeviceIdentityRequest(BaseModel):
    """Voice-enrolled identity kept on this device only."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    phone: Optional[str] = Field(None, max_length=32)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()

    @field_validator("first_name")
    @classmethod
    def first_name_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("first_name must not be blank")
        return v


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ErrorInfo(BaseModel):
    code: str
    message: str


class PositionOut(BaseModel):
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    source: Literal["auto", "manual"]


class AudioOut(BaseModel):
    media_type: str
    size_bytes: int
    duration_seconds: int


class ImageOut(BaseModel):
    media_type: str
    size_bytes: int
    filename: Optional[str] = None


class ReportResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    status: ReportStatus
    priority: ReportPriority
    latitude: float
    longitude: float
    created_at: datetime
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    commune_id: Optional[str] = None
    citizen_name: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    citizen_user_id: Optional[str] = None


class DraftResponse(BaseModel):
    draft_id: str
    state: Literal["idle", "recording", "locating", "photo", "submitting", "done", "failed"]
    report_type: Optional[ReportType] = None
    audio: Optional[AudioOut] = None
    recording_elapsed_seconds: int = 0
    recording_max_seconds: int
    position: Optional[PositionOut] = None
    geolocation_mode: Literal["auto", "manual"]
    locating: bool = False
    image: Optional[ImageOut] = None
    ready: bool = False
    error: Optional[ErrorInfo] = None
    report: Optional[ReportResponse] = None


class ProfileOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    commune_id: Optional[str] = None
    phone: Optional[str] = None


class SessionResponse(BaseModel):
    has_session: bool
    user_id: Optional[str] = None
    profile: Optional[ProfileOut] = None


class DeviceIdentityResponse(BaseModel):
    identity_id: str
    first_name: str
    last_name: str
    display_name: str
    phone: Optional[str] = None
    enrolled_at: Optional[datetime] = None
