"""SQLAlchemy models backing the entity store."""

from .base import Base
from .child import Child  # noqa: F401
from .generation_job import GenerationJob  # noqa: F401
from .lullaby import Lullaby  # noqa: F401
from .voice_profile import VoiceProfile  # noqa: F401

__all__ = [
    "Base",
    "Child",
    "VoiceProfile",
    "Lullaby",
    "GenerationJob",
]
