from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, List, Optional, Sequence, TypeVar, Union
from uuid import UUID

from dodo.domain.jobs import JobCheck
from dodo.domain.media import AudioAsset, StoredBlob
from dodo.domain.models import Child, GenerationJob, Lullaby, LullabyStatus, VoiceProfile

RecordT = TypeVar("RecordT")

SampleSource = Union[str, Path]


class RecordRepository(ABC, Generic[RecordT]):
    """Persistence contract shared by every entity table"""

    @abstractmethod
    async def insert(self, **values: Any) -> RecordT:
        ...

    @abstractmethod
    async def update_by_id(self, record_id: UUID, **values: Any) -> Optional[RecordT]:
        ...

    @abstractmethod
    async def get_by_id(self, record_id: UUID) -> Optional[RecordT]:
        ...

    @abstractmethod
    async def list(self, *, newest_first: bool = False) -> List[RecordT]:
        ...


class JobRepository(RecordRepository[GenerationJob]):
    """Ledger of background generation runs"""

    @abstractmethod
    async def list_unfinished(self) -> List[GenerationJob]:
        ...


class LullabyRepository(RecordRepository[Lullaby]):
    """Lullaby records, whose terminal status is written at most once"""

    @abstractmethod
    async def settle(
        self,
        record_id: UUID,
        *,
        status: LullabyStatus,
        audio_url: Optional[str],
    ) -> bool:
        """Move a generating lullaby to ``status``; False when it was no longer generating."""


class BlobStore(ABC):
    """Binary object storage for voice samples and rendered lullabies"""

    @abstractmethod
    async def put_blob(self, path: str, data: bytes, content_type: str) -> StoredBlob:
        ...

    @abstractmethod
    async def get_blob(self, path: str) -> bytes:
        ...

    @abstractmethod
    async def get_signed_url(self, path: str, ttl_seconds: int) -> Optional[str]:
        """Return a time-limited URL, or None when the backend cannot sign."""

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        ...


@dataclass
class EntityStore:
    """Everything the pipelines need to read and write, independent of technology."""

    children: RecordRepository[Child]
    voice_profiles: RecordRepository[VoiceProfile]
    lullabies: LullabyRepository
    jobs: JobRepository
    blobs: BlobStore


class VoiceCloningGateway(ABC):
    @abstractmethod
    async def clone_voice(self, samples: Sequence[SampleSource], name: str) -> str:
        """Upload the samples and return the provider's voice identity."""


class SpeechSynthesisGateway(ABC):
    @abstractmethod
    async def synthesize(self, voice_id: str, text: str) -> bytes:
        ...


class MusicGenerationGateway(ABC):
    provider_name = "music"

    @abstractmethod
    async def submit_generation(
        self,
        prompt: str,
        style: str,
        duration_minutes: float,
        voice_identity: Optional[str] = None,
    ) -> str:
        ...

    @abstractmethod
    async def submit_cover(self, vocals: bytes, style: str, prompt: str) -> str:
        """Send a vocal track to the audio-transform entry point."""

    @abstractmethod
    async def poll_job(self, job_id: str) -> JobCheck:
        ...

    @abstractmethod
    async def download(self, audio_url: str) -> AudioAsset:
        ...


class FallbackProvider(ABC):
    """Always-available substitute audio source"""

    @abstractmethod
    async def provide(self) -> AudioAsset:
        ...

    @abstractmethod
    def validate(self) -> None:
        """Raise FallbackUnavailable when no asset can ever be produced."""
