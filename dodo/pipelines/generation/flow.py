"""High-level orchestration map for the generation pipelines.

The two pipelines live in this package; the FastAPI controllers only parse
requests and call them:

1. ``ingestion`` - validate the uploaded voice samples (count, size, type).
2. ``voice_profile`` - store samples, clone the voice, settle the profile.
3. ``lullaby`` - create the record and hand it to the ``scheduler``.
4. ``scheduler`` - run the pipeline as a detached task, tracked in the job ledger.
5. ``prompts`` + ``strategies`` - build the provider request and submit it.
6. ``lullaby`` - poll, fall back, persist the audio, settle the record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in a generation pipeline."""

    order: int
    name: str
    module: str
    summary: str


class GenerationFlow:
    """Utility wrapper documenting `/voice/profile` and `/lullabies`."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Sample Ingestion",
            "dodo.pipelines.generation.ingestion",
            "Accept 1-3 non-empty audio uploads of at most 10 MB each.",
        ),
        PipelineStage(
            2,
            "Voice Onboarding",
            "dodo.pipelines.generation.voice_profile",
            "Store samples under voices/<id>/source-<n>, clone the voice, mark the profile ready.",
        ),
        PipelineStage(
            3,
            "Lullaby Request",
            "dodo.pipelines.generation.lullaby",
            "Validate references, insert a generating record, schedule the background run.",
        ),
        PipelineStage(
            4,
            "Scheduling",
            "dodo.pipelines.generation.scheduler",
            "Write the job ledger row and spawn the detached asyncio task.",
        ),
        PipelineStage(
            5,
            "Primary Generation",
            "dodo.pipelines.generation.strategies",
            "Submit the cover or persona request to the music provider and poll the job.",
        ),
        PipelineStage(
            6,
            "Fallback",
            "dodo.services.fallback",
            "Substitute the bundled or statically hosted asset when generation fails.",
        ),
        PipelineStage(
            7,
            "Persistence",
            "dodo.pipelines.generation.lullaby",
            "Upload audio to lullabies/<id>, resolve a signed URL, settle ready or failed.",
        ),
    ]

    @classmethod
    def stages(cls) -> Iterable[PipelineStage]:
        """Return the ordered pipeline stages."""

        return tuple(cls._STAGES)

    @classmethod
    def describe(cls) -> str:
        """Return a multi-line description suitable for logs or docs."""

        return "\n".join(
            f"{stage.order:02d}. {stage.name} ({stage.module}) - {stage.summary}"
            for stage in cls._STAGES
        )


__all__ = ["GenerationFlow", "PipelineStage"]
