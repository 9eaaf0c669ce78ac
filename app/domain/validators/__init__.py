"""Domain validators. Pure validation functions."""

from app.domain.validators.report_validator import (
    REQUIRED_DRAFT_FIELDS,
    DraftValidation,
    NotReady,
    Ready,
    validate_coordinates,
    validate_draft,
    validate_report_payload,
    validate_report_type,
)

__all__ = [
    "REQUIRED_DRAFT_FIELDS",
    "DraftValidation",
    "NotReady",
    "Ready",
    "validate_coordinates",
    "validate_draft",
    "validate_report_payload",
    "validate_report_type",
]
