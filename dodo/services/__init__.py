"""Service layer helpers for external integrations."""

from .elevenlabs import ElevenLabsGateway
from .fallback import StaticAssetFallbackProvider
from .polling import PollOutcome, PollOutcomeKind, poll_until_terminal
from .suno import SunoGateway

__all__ = [
    "ElevenLabsGateway",
    "SunoGateway",
    "StaticAssetFallbackProvider",
    "PollOutcome",
    "PollOutcomeKind",
    "poll_until_terminal",
]
