# Application layer: ports, upload gateway and errors shared by the orchestrator and adapters.
# SubmissionOrchestrator is imported from its module; it depends on app.identity, which imports back here.

from app.application.blob_storage import BlobStorage
from app.application.exceptions import (
    ApplicationError,
    AuthenticationFailedError,
    DestinationMissingError,
    DraftNotFoundError,
    TransportFailureError,
    UnexpectedError,
)
from app.application.media_gateway import MediaBlob, MediaUploadGateway, UploadedMedia
from app.application.report_repository import ReportRepository

__all__ = [
    "ApplicationError",
    "AuthenticationFailedError",
    "BlobStorage",
    "DestinationMissingError",
    "DraftNotFoundError",
    "MediaBlob",
    "MediaUploadGateway",
    "ReportRepository",
    "TransportFailureError",
    "UnexpectedError",
    "UploadedMedia",
]
