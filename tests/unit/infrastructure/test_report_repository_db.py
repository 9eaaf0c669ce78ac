"""DbReportRepository with a mocked async session factory."""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.application.exceptions import TransportFailureError
from app.domain.exceptions import MissingRequiredFieldsError
from app.domain.models.report import ReportPayload, ReportPriority, ReportStatus
from app.infrastructure.database.report_repository_db import DbReportRepository

REPORT_ID = uuid.UUID("8f14e45f-ceea-467f-a0e6-5c1b2f0d9a11")
CREATED_AT = datetime(2026, 5, 4, 12, 0, tzinfo=timezone.utc)


def _session_factory(session):
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context)


@pytest.fixture
def session():
    session = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()

    async def refresh(orm):
        # Server defaults as the database would fill them.
        orm.id = REPORT_ID
        orm.created_at = CREATED_AT

    session.refresh = AsyncMock(side_effect=refresh)
    return session


def _payload(**overrides):
    fields = dict(
        type="voirie",
        latitude=14.6928,
        longitude=-17.4467,
        audio_url="https://storage.test/public/report-audio/records/a.webm",
    )
    fields.update(overrides)
    return ReportPayload(**fields)


async def test_create_persists_and_returns_stored_report(session):
    repository = DbReportRepository(_session_factory(session))

    report = await repository.create(_payload(citizen_name="Fatou Diop"))

    orm = session.add.call_args.args[0]
    assert orm.type == "voirie"
    assert orm.status is None
    assert orm.priority is None
    session.commit.assert_awaited_once()
    assert report.id == str(REPORT_ID)
    assert report.status == ReportStatus.PENDING
    assert report.priority == ReportPriority.NORMAL
    assert report.created_at == CREATED_AT
    assert report.citizen_name == "Fatou Diop"
    assert report.image_url is None


async def test_zero_coordinates_are_accepted(session):
    repository = DbReportRepository(_session_factory(session))
    report = await repository.create(_payload(latitude=0.0, longitude=0.0))
    assert (report.latitude, report.longitude) == (0.0, 0.0)


@pytest.mark.parametrize(
    "overrides,missing",
    [
        ({"type": None}, ("type",)),
        ({"type": "  "}, ("type",)),
        ({"latitude": None, "longitude": None}, ("latitude", "longitude")),
    ],
)
async def test_missing_required_fields_never_reach_the_database(session, overrides, missing):
    factory = _session_factory(session)
    repository = DbReportRepository(factory)

    with pytest.raises(MissingRequiredFieldsError) as exc_info:
        await repository.create(_payload(**overrides))

    assert exc_info.value.fields == missing
    factory.assert_not_called()


async def test_database_error_maps_to_transport_failure(session):
    session.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down")))
    repository = DbReportRepository(_session_factory(session))

    with pytest.raises(TransportFailureError) as exc_info:
        await repository.create(_payload())
    assert isinstance(exc_info.value.__cause__, OperationalError)
