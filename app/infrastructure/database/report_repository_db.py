"""DB-backed report repository. Persists reports to PostgreSQL (reports table)."""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.exceptions import TransportFailureError
from app.domain.models.report import (
    ReportPayload,
    ReportPriority,
    ReportStatus,
    StoredReport,
)
from app.domain.validators.report_validator import validate_report_payload
from app.infrastructure.database.models import Report

logger = logging.getLogger(__name__)


def _to_stored(orm: Report) -> StoredReport:
    created_at = orm.created_at or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return StoredReport(
        id=str(orm.id),
        type=orm.type,
        status=ReportStatus(orm.status or ReportStatus.PENDING.value),
        priority=ReportPriority(orm.priority or ReportPriority.NORMAL.value),
        latitude=orm.latitude,
        longitude=orm.longitude,
        created_at=created_at,
        audio_url=orm.audio_url,
        image_url=orm.image_url,
        commune_id=orm.commune_id,
        citizen_name=orm.citizen_name,
        phone=orm.phone,
        description=orm.description,
        citizen_user_id=orm.citizen_user_id,
    )


class DbReportRepository:
    """Implements ReportRepository. One short-lived session per create()."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, payload: ReportPayload) -> StoredReport:
        validate_report_payload(payload)
        orm = Report(
            type=payload.type,
            latitude=payload.latitude,
            longitude=payload.longitude,
            description=payload.description,
            commune_id=payload.commune_id,
            phone=payload.phone,
            citizen_name=payload.citizen_name,
            citizen_user_id=payload.citizen_user_id,
            audio_url=payload.audio_url,
            image_url=payload.image_url,
        )
        try:
            async with self._session_factory() as session:
                session.add(orm)
                await session.flush()
                await session.commit()
                await session.refresh(orm)
        except SQLAlchemyError as e:
            logger.error("report_insert_failed", extra={"error": str(e)})
            raise TransportFailureError(f"Report could not be saved: {e.__class__.__name__}") from e
        stored = _to_stored(orm)
        logger.info("report_created", extra={"report_id": stored.id, "report_type": stored.type})
        return stored
