"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from dodo.application.interfaces import EntityStore
from dodo.config.dependencies import get_container
from dodo.pipelines.generation import LullabyPipeline, VoiceProfilePipeline


def get_entity_store() -> EntityStore:
    return get_container().store


def get_voice_profile_pipeline() -> VoiceProfilePipeline:
    return get_container().voice_profiles


def get_lullaby_pipeline() -> LullabyPipeline:
    return get_container().lullabies


StoreDep = Annotated[EntityStore, Depends(get_entity_store)]
VoicePipelineDep = Annotated[VoiceProfilePipeline, Depends(get_voice_profile_pipeline)]
LullabyPipelineDep = Annotated[LullabyPipeline, Depends(get_lullaby_pipeline)]


__all__ = [
    "get_entity_store",
    "get_voice_profile_pipeline",
    "get_lullaby_pipeline",
    "StoreDep",
    "VoicePipelineDep",
    "LullabyPipelineDep",
]
