"""Validators for report drafts and report writes. Pure functions, no infrastructure or DB access."""

from dataclasses import dataclass
from typing import Union

from app.domain.exceptions import (
    DomainValidationError,
    InvalidReportTypeError,
    MissingRequiredFieldsError,
)
from app.domain.models.report import ReportDraft, ReportPayload, ReportType

# Coordinate bounds (WGS84)
LATITUDE_MIN, LATITUDE_MAX = -90.0, 90.0
LONGITUDE_MIN, LONGITUDE_MAX = -180.0, 180.0

# Fixed order for readiness checks; the first missing field is reported.
REQUIRED_DRAFT_FIELDS = ("type", "audio", "position")

_NOT_READY_MESSAGES = {
    "type": "Choose the type of problem to report",
    "audio": "An audio recording is required",
    "position": "A GPS position is required",
}


@dataclass(frozen=True)
class Ready:
    ready: bool = True


@dataclass(frozen=True)
class NotReady:
    field: str
    message: str
    ready: bool = False


DraftValidation = Union[Ready, NotReady]


def validate_draft(draft: ReportDraft) -> DraftValidation:
    """
    Decide submission readiness. Required: type, audio, position (in that order).
    Image and commune are optional.
    """
    present = {
        "type": draft.report_type is not None,
        "audio": draft.audio is not None and draft.audio.size_bytes > 0,
        "position": draft.position is not None,
    }
    for field in REQUIRED_DRAFT_FIELDS:
        if not present[field]:
            return NotReady(field=field, message=_NOT_READY_MESSAGES[field])
    return Ready()


def validate_report_type(value: str) -> ReportType:
    """Parse a report type value. Raises InvalidReportTypeError if unknown."""
    try:
        return ReportType(value)
    except ValueError as e:
        allowed = ", ".join(t.value for t in ReportType)
        raise InvalidReportTypeError(
            f"Unknown report type '{value}'. Allowed: {allowed}"
        ) from e


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Raise DomainValidationError when coordinates fall outside WGS84 bounds."""
    if not (LATITUDE_MIN <= latitude <= LATITUDE_MAX):
        raise DomainValidationError(
            f"latitude must be between {LATITUDE_MIN} and {LATITUDE_MAX}, got {latitude}"
        )
    if not (LONGITUDE_MIN <= longitude <= LONGITUDE_MAX):
        raise DomainValidationError(
            f"longitude must be between {LONGITUDE_MIN} and {LONGITUDE_MAX}, got {longitude}"
        )


def validate_report_payload(payload: ReportPayload) -> None:
    """Re-check required columns of a report write. Raises MissingRequiredFieldsError."""
    missing = tuple(
        name
        for name, value in (
            ("type", payload.type),
            ("latitude", payload.latitude),
            ("longitude", payload.longitude),
        )
        if value is None or (isinstance(value, str) and not value.strip())
    )
    if missing:
        raise MissingRequiredFieldsError(
            "type, latitude and longitude are required", fields=missing
        )
