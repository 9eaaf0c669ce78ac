"""Failure categorization for metrics and logs. Maps exceptions to the error taxonomy."""

from enum import Enum

from app.application.exceptions import (
    ApplicationError,
    DestinationMissingError,
    TransportFailureError,
)
from app.domain.exceptions import (
    DeviceError,
    DomainError,
    DraftNotReadyError,
    ErrorCode,
    InvalidDraftTransitionError,
    MediaValidationError,
    MissingRequiredFieldsError,
)
from app.security.exceptions import SecurityError


class FailureCategory(str, Enum):
    """Coarse buckets for dashboards; the ErrorCode stays the precise value."""

    DEVICE_ERROR = "DEVICE_ERROR"
    MEDIA_ERROR = "MEDIA_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    WORKFLOW_ERROR = "WORKFLOW_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INFRA_ERROR = "INFRA_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class FailureClassifier:
    """
    Classifies exceptions. Callers increment metrics and log with the result.
    """

    @staticmethod
    def classify(exception: BaseException) -> FailureCategory:
        """Map exception to FailureCategory. Unknown -> UNEXPECTED_ERROR."""
        if isinstance(exception, DeviceError):
            return FailureCategory.DEVICE_ERROR
        if isinstance(exception, MediaValidationError):
            return FailureCategory.MEDIA_ERROR
        if isinstance(exception, (DraftNotReadyError, InvalidDraftTransitionError)):
            return FailureCategory.WORKFLOW_ERROR
        if isinstance(exception, (MissingRequiredFieldsError, DomainError)):
            return FailureCategory.VALIDATION_ERROR
        if isinstance(exception, DestinationMissingError):
            return FailureCategory.CONFIGURATION_ERROR
        if isinstance(exception, (TransportFailureError, SecurityError)):
            return FailureCategory.INFRA_ERROR
        if isinstance(exception, ApplicationError) and exception.code != ErrorCode.UNEXPECTED_ERROR:
            return FailureCategory.INFRA_ERROR
        return FailureCategory.UNEXPECTED_ERROR

    @staticmethod
    def error_code(exception: BaseException) -> ErrorCode:
        """Taxonomy code carried by domain/application errors; UNEXPECTED_ERROR otherwise."""
        if isinstance(exception, (DomainError, ApplicationError)):
            return exception.code
        return ErrorCode.UNEXPECTED_ERROR
