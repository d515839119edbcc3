"""Pydantic schemas used as views in the MVC architecture."""

from .children import ChildCreateRequest, ChildResponse
from .common import ErrorResponse, HealthResponse
from .lullabies import LullabyCreateRequest, LullabyResponse
from .voice import VoiceProfileResponse

__all__ = [
    "ChildCreateRequest",
    "ChildResponse",
    "ErrorResponse",
    "HealthResponse",
    "LullabyCreateRequest",
    "LullabyResponse",
    "VoiceProfileResponse",
]
