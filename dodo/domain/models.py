from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class VoiceProfileStatus(str, Enum):
    # RECORDING only exists on the client while samples are captured.
    RECORDING = "recording"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class LullabyStyle(str, Enum):
    SOFT = "soft"
    JOYFUL = "joyful"
    SPOKEN = "spoken"
    MELODIC = "melodic"


class LullabyStatus(str, Enum):
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not LullabyStatus.GENERATING

    def can_transition_to(self, target: "LullabyStatus") -> bool:
        """Only generating -> ready and generating -> failed are allowed."""
        return self is LullabyStatus.GENERATING and target.is_terminal


class JobState(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"


class Child(BaseModel):
    """Domain model for Child entity"""
    id: UUID
    name: str
    age_months: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class VoiceProfile(BaseModel):
    """Domain model for VoiceProfile entity"""
    id: UUID
    status: VoiceProfileStatus
    external_voice_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Lullaby(BaseModel):
    """Domain model for Lullaby entity"""
    id: UUID
    child_id: UUID
    voice_profile_id: UUID
    title: str
    style: LullabyStyle
    duration_minutes: float
    language_code: str
    status: LullabyStatus
    audio_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class GenerationJob(BaseModel):
    """Ledger entry tracking one background generation run."""
    id: UUID
    lullaby_id: UUID
    state: JobState
    attempts: int = 0
    provider_job_id: Optional[str] = None
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
