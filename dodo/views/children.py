"""Pydantic schemas for child records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator


class ChildCreateRequest(BaseModel):
    """Payload to register a child."""

    name: str = Field(..., max_length=100)
    ageMonths: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("ageMonths", "age_months"),
        serialization_alias="ageMonths",
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    class Config:
        populate_by_name = True


class ChildResponse(BaseModel):
    id: UUID
    name: str
    ageMonths: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("ageMonths", "age_months"),
        serialization_alias="ageMonths",
    )
    createdAt: datetime = Field(
        ...,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )

    class Config:
        populate_by_name = True
        from_attributes = True
