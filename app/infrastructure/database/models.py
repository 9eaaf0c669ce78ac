# app/infrastructure/database/models.py

import uuid

from sqlalchemy import Column, DateTime, Float, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func, text

from app.infrastructure.database.session import Base


class BaseModel(Base):
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Report(BaseModel):
    """Incident report row. status and priority are always left to the server defaults on insert."""

    __tablename__ = "reports"

    type = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, server_default=text("'pending'"))
    priority = Column(String, nullable=False, server_default=text("'normal'"))
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    commune_id = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    citizen_name = Column(String, nullable=True)
    citizen_user_id = Column(String, nullable=True)
    audio_url = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
