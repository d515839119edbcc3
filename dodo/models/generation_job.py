"""SQLAlchemy model for the background generation job ledger."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy import Enum as SqlEnum

from dodo.domain.models import JobState
from dodo.models.base import Base, utc_now


class GenerationJob(Base):
    """One scheduled run of the lullaby pipeline, kept separate from the lullaby row."""

    __tablename__ = "generation_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    lullaby_id = Column(
        Uuid,
        ForeignKey("lullabies.id"),
        nullable=False,
        unique=True,
        index=True,
    )
    state = Column(
        SqlEnum(
            JobState,
            name="generation_job_state",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=JobState.QUEUED,
        index=True,
    )
    attempts = Column(Integer, nullable=False, default=0)
    provider_job_id = Column(String(128), nullable=True)
    last_error = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )


__all__ = ["GenerationJob"]
