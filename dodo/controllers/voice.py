"""Voice profile onboarding endpoints."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from dodo.controllers.dependencies import VoicePipelineDep
from dodo.domain.models import VoiceProfile
from dodo.pipelines.generation import collect_samples
from dodo.views import ErrorResponse, VoiceProfileResponse

router = APIRouter(prefix="/voice", tags=["voice"])


def _serialize_profile(profile: VoiceProfile) -> VoiceProfileResponse:
    return VoiceProfileResponse(
        id=profile.id,
        status=profile.status,
        externalVoiceId=profile.external_voice_id,
        createdAt=profile.created_at,
    )


@router.post(
    "/profile",
    response_model=VoiceProfileResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_voice_profile(
    pipeline: VoicePipelineDep,
    audioFiles: Optional[List[UploadFile]] = File(None),
) -> VoiceProfileResponse:
    """Store 1-3 voice samples and clone a voice from them."""

    samples = await collect_samples(audioFiles)
    profile = await pipeline.create(samples)
    return _serialize_profile(profile)


@router.get(
    "/profile/{profile_id}",
    response_model=VoiceProfileResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_voice_profile(
    profile_id: UUID,
    pipeline: VoicePipelineDep,
) -> VoiceProfileResponse:
    profile = await pipeline.get(profile_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Voice profile not found",
        )
    return _serialize_profile(profile)
