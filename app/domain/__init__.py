"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from app.domain.exceptions import (
    DeviceError,
    DomainError,
    DomainValidationError,
    DraftNotReadyError,
    ErrorCode,
    FileTooLargeError,
    InvalidDraftTransitionError,
    InvalidMediaTypeError,
    InvalidReportTypeError,
    MissingRequiredFieldsError,
    PermissionDeniedError,
)
from app.domain.models import (
    Position,
    ReportDraft,
    ReportPayload,
    ReportType,
    StoredReport,
)
from app.domain.validators import (
    validate_coordinates,
    validate_draft,
    validate_report_payload,
    validate_report_type,
)

__all__ = [
    "DeviceError",
    "DomainError",
    "DomainValidationError",
    "DraftNotReadyError",
    "ErrorCode",
    "FileTooLargeError",
    "InvalidDraftTransitionError",
    "InvalidMediaTypeError",
    "InvalidReportTypeError",
    "MissingRequiredFieldsError",
    "PermissionDeniedError",
    "Position",
    "ReportDraft",
    "ReportPayload",
    "ReportType",
    "StoredReport",
    "validate_coordinates",
    "validate_draft",
    "validate_report_payload",
    "validate_report_type",
]
