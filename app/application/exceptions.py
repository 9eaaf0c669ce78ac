"""Application-layer exceptions. Do not reuse domain exceptions."""

from app.domain.exceptions import ErrorCode


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    code: ErrorCode = ErrorCode.UNEXPECTED_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DestinationMissingError(ApplicationError):
    """Raised when the named storage bucket does not exist. Operator/configuration defect."""

    code = ErrorCode.DESTINATION_MISSING

    def __init__(self, message: str, destination: str) -> None:
        self.destination = destination
        super().__init__(message)


class TransportFailureError(ApplicationError):
    """Raised on generic network or backend failure (storage, database, auth)."""

    code = ErrorCode.TRANSPORT_FAILURE

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class UnexpectedError(ApplicationError):
    """Catch-all for failures outside the taxonomy. Wraps the original exception."""

    code = ErrorCode.UNEXPECTED_ERROR


class AuthenticationFailedError(ApplicationError):
    """Raised when sign-in fails. Message is user-safe and never tells which credential was wrong."""

    code = ErrorCode.AUTHENTICATION_FAILED


class DraftNotFoundError(ApplicationError):
    """Raised when a draft id is unknown (never opened, or already discarded)."""

    code = ErrorCode.DRAFT_NOT_FOUND

    def __init__(self, message: str, draft_id: str) -> None:
        self.draft_id = draft_id
        super().__init__(message)
