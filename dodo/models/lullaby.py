"""SQLAlchemy model for generated lullabies."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as SqlEnum

from dodo.domain.models import LullabyStatus, LullabyStyle
from dodo.models.base import Base, utc_now


class Lullaby(Base):
    __tablename__ = "lullabies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    child_id = Column(Uuid, ForeignKey("children.id"), nullable=False, index=True)
    voice_profile_id = Column(
        Uuid,
        ForeignKey("voice_profiles.id"),
        nullable=False,
        index=True,
    )
    title = Column(String(120), nullable=False, default="Lullaby")
    style = Column(
        SqlEnum(
            LullabyStyle,
            name="lullaby_style",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    duration_minutes = Column(Float, nullable=False)
    language_code = Column(String(35), nullable=False)
    status = Column(
        SqlEnum(
            LullabyStatus,
            name="lullaby_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=LullabyStatus.GENERATING,
    )
    audio_url = Column(Text, nullable=True)
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


__all__ = ["Lullaby"]
