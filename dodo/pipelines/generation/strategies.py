"""Primary generation strategies.

Exactly one strategy is active per process, chosen from
``GENERATION_MODE``; the orchestrator never alternates between them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from dodo.application.interfaces import MusicGenerationGateway, SpeechSynthesisGateway

from .prompts import LullabyPrompt

logger = logging.getLogger("dodo.pipelines.generation")


class GenerationStrategy(ABC):
    """Turn a voice identity plus a prompt into a provider job id."""

    name: str

    @abstractmethod
    async def submit(self, voice_identity: str, prompt: LullabyPrompt) -> str:
        ...


class CoverVocalsStrategy(GenerationStrategy):
    """Synthesize the lyrics in the cloned voice, then compose around that track."""

    name = "cover"

    def __init__(
        self,
        speech: SpeechSynthesisGateway,
        music: MusicGenerationGateway,
    ) -> None:
        self._speech = speech
        self._music = music

    async def submit(self, voice_identity: str, prompt: LullabyPrompt) -> str:
        vocals = await self._speech.synthesize(voice_identity, prompt.lyrics)
        logger.info("Synthesized %d bytes of vocals with voice %s", len(vocals), voice_identity)
        return await self._music.submit_cover(vocals, prompt.style, prompt.lyrics)


class PersonaStrategy(GenerationStrategy):
    """Ask the music provider to generate directly with the voice as persona."""

    name = "persona"

    def __init__(self, music: MusicGenerationGateway) -> None:
        self._music = music

    async def submit(self, voice_identity: str, prompt: LullabyPrompt) -> str:
        return await self._music.submit_generation(
            prompt.lyrics,
            prompt.style,
            prompt.duration_minutes,
            voice_identity=voice_identity,
        )


def build_strategy(
    mode: str,
    *,
    speech: SpeechSynthesisGateway,
    music: MusicGenerationGateway,
) -> GenerationStrategy:
    if mode == CoverVocalsStrategy.name:
        return CoverVocalsStrategy(speech, music)
    if mode == PersonaStrategy.name:
        return PersonaStrategy(music)
    raise ValueError(f"Unknown generation mode: {mode!r}")


__all__ = [
    "GenerationStrategy",
    "CoverVocalsStrategy",
    "PersonaStrategy",
    "build_strategy",
]
