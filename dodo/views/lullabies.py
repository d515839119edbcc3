"""Pydantic schemas for lullaby generation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from dodo.domain.models import LullabyStatus, LullabyStyle


class LullabyCreateRequest(BaseModel):
    """Payload to request a new lullaby."""

    childId: UUID = Field(
        ...,
        validation_alias=AliasChoices("childId", "child_id"),
        serialization_alias="childId",
    )
    voiceProfileId: UUID = Field(
        ...,
        validation_alias=AliasChoices("voiceProfileId", "voice_profile_id"),
        serialization_alias="voiceProfileId",
    )
    style: LullabyStyle
    durationMinutes: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        strict=True,
        validation_alias=AliasChoices("durationMinutes", "duration_minutes"),
        serialization_alias="durationMinutes",
    )
    languageCode: str = Field(
        ...,
        min_length=1,
        max_length=35,
        validation_alias=AliasChoices("languageCode", "language_code"),
        serialization_alias="languageCode",
    )

    class Config:
        populate_by_name = True


class LullabyResponse(BaseModel):
    """Lullaby record; ``audioUrl`` is only present once ``status`` is ready."""

    id: UUID
    childId: UUID = Field(
        ...,
        validation_alias=AliasChoices("childId", "child_id"),
        serialization_alias="childId",
    )
    voiceProfileId: UUID = Field(
        ...,
        validation_alias=AliasChoices("voiceProfileId", "voice_profile_id"),
        serialization_alias="voiceProfileId",
    )
    title: str
    style: LullabyStyle
    durationMinutes: float = Field(
        ...,
        validation_alias=AliasChoices("durationMinutes", "duration_minutes"),
        serialization_alias="durationMinutes",
    )
    languageCode: str = Field(
        ...,
        validation_alias=AliasChoices("languageCode", "language_code"),
        serialization_alias="languageCode",
    )
    status: LullabyStatus
    audioUrl: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("audioUrl", "audio_url"),
        serialization_alias="audioUrl",
    )
    createdAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    class Config:
        populate_by_name = True
        from_attributes = True
