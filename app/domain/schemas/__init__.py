"""Domain schemas. Request/response and validation."""

from app.domain.schemas.report import (
    CapabilityReport,
    CoordinatesRequest,
    DeviceIdentityRequest,
    DeviceIdentityResponse,
    DraftResponse,
    ErrorInfo,
    PositionErrorReport,
    ReportResponse,
    SelectTypeRequest,
    SessionResponse,
    SignInRequest,
)

__all__ = [
    "CapabilityReport",
    "CoordinatesRequest",
    "DeviceIdentityRequest",
    "DeviceIdentityResponse",
    "DraftResponse",
    "ErrorInfo",
    "PositionErrorReport",
    "ReportResponse",
    "SelectTypeRequest",
    "SessionResponse",
    "SignInRequest",
]
