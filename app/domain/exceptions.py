"""Domain-specific exceptions. Pure domain layer. No infrastructure."""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error taxonomy shared by capture, validation, upload and persistence."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    DEVICE_UNSUPPORTED = "DEVICE_UNSUPPORTED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    INVALID_MEDIA_TYPE = "INVALID_MEDIA_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    DESTINATION_MISSING = "DESTINATION_MISSING"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    DRAFT_NOT_READY = "DRAFT_NOT_READY"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_REPORT_TYPE = "INVALID_REPORT_TYPE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DRAFT_NOT_FOUND = "DRAFT_NOT_FOUND"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


class DomainError(Exception):
    """Base for all domain-layer errors."""

    code: ErrorCode = ErrorCode.UNEXPECTED_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    code = ErrorCode.VALIDATION_ERROR


class DeviceError(DomainError):
    """Raised by a capture device port (microphone, position sensor)."""


class PermissionDeniedError(DeviceError):
    """Raised when the user refused microphone or geolocation access."""

    code = ErrorCode.PERMISSION_DENIED

    def __init__(self, message: str, device: str = "") -> None:
        self.device = device
        super().__init__(message)


class DeviceUnsupportedError(DeviceError):
    """Raised when the capture capability is absent. Terminal for that channel."""

    code = ErrorCode.DEVICE_UNSUPPORTED

    def __init__(self, message: str, device: str = "") -> None:
        self.device = device
        super().__init__(message)


class PositionUnavailableError(DeviceError):
    """Raised when the position sensor cannot produce a fix."""

    code = ErrorCode.POSITION_UNAVAILABLE


class GeolocationTimeoutError(DeviceError):
    """Raised when auto-capture exceeds its elapsed-time bound."""

    code = ErrorCode.TIMEOUT


class MediaValidationError(DomainError):
    """Raised when a media blob violates its destination policy."""


class InvalidMediaTypeError(MediaValidationError):
    """Raised when a media type is not in the whitelist for its kind."""

    code = ErrorCode.INVALID_MEDIA_TYPE


class FileTooLargeError(MediaValidationError):
    """Raised when a blob exceeds the size ceiling for its kind."""

    code = ErrorCode.FILE_TOO_LARGE

    def __init__(self, message: str, size_bytes: int = 0, max_bytes: int = 0) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(message)


class MissingRequiredFieldsError(DomainError):
    """Raised when a report write lacks type, latitude or longitude."""

    code = ErrorCode.MISSING_REQUIRED_FIELDS

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        self.fields = fields
        super().__init__(message)


class DraftNotReadyError(DomainError):
    """Raised when a draft is submitted before type, audio and position are set."""

    code = ErrorCode.DRAFT_NOT_READY

    def __init__(self, message: str, field: str) -> None:
        self.field = field
        super().__init__(message)


class InvalidDraftTransitionError(DomainError):
    """Raised when a user action is not allowed in the current submission state."""

    code = ErrorCode.INVALID_TRANSITION


class InvalidReportTypeError(DomainError):
    """Raised when the report type is not one of the known categories."""

    code = ErrorCode.INVALID_REPORT_TYPE
