"""Lullaby generation endpoints.

``POST /lullabies`` answers as soon as the record exists; clients poll
``GET /lullabies/{id}`` until the status leaves ``generating``.
"""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from dodo.controllers.dependencies import LullabyPipelineDep
from dodo.domain.models import Lullaby
from dodo.views import ErrorResponse, LullabyCreateRequest, LullabyResponse

router = APIRouter(prefix="/lullabies", tags=["lullabies"])


def _serialize_lullaby(lullaby: Lullaby) -> LullabyResponse:
    return LullabyResponse(
        id=lullaby.id,
        childId=lullaby.child_id,
        voiceProfileId=lullaby.voice_profile_id,
        title=lullaby.title,
        style=lullaby.style,
        durationMinutes=lullaby.duration_minutes,
        languageCode=lullaby.language_code,
        status=lullaby.status,
        audioUrl=lullaby.audio_url,
        createdAt=lullaby.created_at,
    )


@router.post(
    "",
    response_model=LullabyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_lullaby(
    payload: LullabyCreateRequest,
    pipeline: LullabyPipelineDep,
) -> LullabyResponse:
    lullaby = await pipeline.create(
        child_id=payload.childId,
        voice_profile_id=payload.voiceProfileId,
        style=payload.style,
        duration_minutes=payload.durationMinutes,
        language_code=payload.languageCode,
    )
    return _serialize_lullaby(lullaby)


@router.get("", response_model=List[LullabyResponse])
async def list_lullabies(pipeline: LullabyPipelineDep) -> List[LullabyResponse]:
    """Lullabies ordered newest first."""

    return [_serialize_lullaby(lullaby) for lullaby in await pipeline.list()]


@router.get(
    "/{lullaby_id}",
    response_model=LullabyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_lullaby(
    lullaby_id: UUID,
    pipeline: LullabyPipelineDep,
) -> LullabyResponse:
    lullaby = await pipeline.get(lullaby_id)
    if lullaby is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lullaby not found",
        )
    return _serialize_lullaby(lullaby)
