"""Pydantic schemas for voice profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from dodo.domain.models import VoiceProfileStatus


class VoiceProfileResponse(BaseModel):
    """Voice profile as seen by the mobile client."""

    id: UUID
    status: VoiceProfileStatus
    externalVoiceId: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("externalVoiceId", "external_voice_id"),
        serialization_alias="externalVoiceId",
    )
    createdAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    class Config:
        populate_by_name = True
        from_attributes = True
