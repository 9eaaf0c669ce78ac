"""Report repository protocol. Application layer depends on this; infrastructure implements it."""

from typing import Protocol

from app.domain.models.report import ReportPayload, StoredReport


class ReportRepository(Protocol):
    """Create-only persistence for reports. Status and priority are defaulted by the store."""

    async def create(self, payload: ReportPayload) -> StoredReport:
        """
        Persist payload and return the stored row (generated id, status, priority, created_at).
        Raises MissingRequiredFieldsError when type/latitude/longitude are absent,
        TransportFailureError on backend failure.
        """
        ...
