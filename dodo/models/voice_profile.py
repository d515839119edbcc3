"""SQLAlchemy model for cloned voice profiles."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy import Enum as SqlEnum

from dodo.domain.models import VoiceProfileStatus
from dodo.models.base import Base, utc_now


class VoiceProfile(Base):
    __tablename__ = "voice_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    status = Column(
        SqlEnum(
            VoiceProfileStatus,
            name="voice_profile_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=VoiceProfileStatus.PROCESSING,
    )
    # Written at most once, by the cloning attempt made at creation.
    external_voice_id = Column(String(128), nullable=True)
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


__all__ = ["VoiceProfile"]
