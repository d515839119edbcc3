"""Voice onboarding and lullaby generation pipelines.

Modules follow the order in which a lullaby comes to life:

1. `ingestion` - validate uploaded voice samples.
2. `voice_profile` - store samples and clone the voice.
3. `lullaby` - create the record, then generate, fall back and persist.
4. `scheduler` - detached execution plus the durable job ledger.
5. `prompts` / `strategies` - what gets sent to the music provider.
6. `flow` - human-readable description of the end-to-end stages.
"""

from .flow import GenerationFlow, PipelineStage
from .ingestion import collect_samples, read_sample, resolve_content_type
from .lullaby import LullabyPipeline, lullaby_blob_path
from .prompts import LullabyPrompt, build_lullaby_prompt
from .scheduler import GenerationScheduler
from .strategies import (
    CoverVocalsStrategy,
    GenerationStrategy,
    PersonaStrategy,
    build_strategy,
)
from .voice_profile import VoiceProfilePipeline, sample_blob_path

__all__ = [
    "GenerationFlow",
    "PipelineStage",
    "collect_samples",
    "read_sample",
    "resolve_content_type",
    "LullabyPipeline",
    "lullaby_blob_path",
    "LullabyPrompt",
    "build_lullaby_prompt",
    "GenerationScheduler",
    "GenerationStrategy",
    "CoverVocalsStrategy",
    "PersonaStrategy",
    "build_strategy",
    "VoiceProfilePipeline",
    "sample_blob_path",
]
