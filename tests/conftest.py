"""Shared fixtures: a real SQLite-backed store, an in-memory blob store and provider fakes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="dodo-tests-"))
os.environ["DB_DSN"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'import.db'}"
os.environ["LOG_FILE"] = ""
os.environ["GENERATION_LOG_FILE"] = ""
os.environ["S3_BUCKET_NAME"] = "dodo-test"
os.environ.setdefault("ELEVENLABS_API_KEY", "test-elevenlabs-key")
os.environ.setdefault("SUNO_API_KEY", "test-suno-key")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from dodo.application.interfaces import (  # noqa: E402
    BlobStore,
    FallbackProvider,
    MusicGenerationGateway,
    SampleSource,
    SpeechSynthesisGateway,
    VoiceCloningGateway,
)
from dodo.database import create_engine, create_session_factory, init_models  # noqa: E402
from dodo.domain.errors import FallbackUnavailable, StorageError  # noqa: E402
from dodo.domain.jobs import JobCheck, JobStatus  # noqa: E402
from dodo.domain.media import AudioAsset, StoredBlob  # noqa: E402
from dodo.domain.models import LullabyStatus, LullabyStyle, VoiceProfileStatus  # noqa: E402
from dodo.infrastructure.persistence.repositories_sqlalchemy import (  # noqa: E402
    build_entity_store,
)
from dodo.pipelines.generation import (  # noqa: E402
    GenerationScheduler,
    LullabyPipeline,
    VoiceProfilePipeline,
    build_strategy,
)


async def no_sleep(_seconds: float) -> None:
    return None


class InMemoryBlobStore(BlobStore):
    def __init__(self, *, can_sign: bool = True, fail_puts: bool = False) -> None:
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.can_sign = can_sign
        self.fail_puts = fail_puts

    async def put_blob(self, path: str, data: bytes, content_type: str) -> StoredBlob:
        if self.fail_puts:
            raise StorageError("blob store unavailable")
        if not data:
            raise StorageError(f"Refusing to store an empty payload at {path}.")
        self.objects[path] = (data, content_type)
        return StoredBlob(path=path, content_type=content_type, size=len(data))

    async def get_blob(self, path: str) -> bytes:
        try:
            return self.objects[path][0]
        except KeyError as exc:
            raise StorageError(f"No blob at {path}") from exc

    async def get_signed_url(self, path: str, ttl_seconds: int) -> Optional[str]:
        if not self.can_sign:
            return None
        return f"https://signed.dodo.test/{path}?expires={ttl_seconds}"

    def get_public_url(self, path: str) -> str:
        return f"https://public.dodo.test/{path}"


class FakeCloning(VoiceCloningGateway):
    def __init__(self, voice_id: str = "voice-123", error: Optional[Exception] = None) -> None:
        self.voice_id = voice_id
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def clone_voice(self, samples: Sequence[SampleSource], name: str) -> str:
        paths = [Path(sample) for sample in samples]
        self.calls.append(
            {
                "paths": paths,
                "name": name,
                "existed": [path.is_file() for path in paths],
                "contents": [path.read_bytes() for path in paths if path.is_file()],
            }
        )
        if self.error is not None:
            raise self.error
        return self.voice_id


class FakeSpeech(SpeechSynthesisGateway):
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []

    async def synthesize(self, voice_id: str, text: str) -> bytes:
        self.calls.append((voice_id, text))
        return b"synthesized-vocals"


class FakeMusic(MusicGenerationGateway):
    provider_name = "fake-music"

    def __init__(
        self,
        checks: Optional[List[Any]] = None,
        *,
        submit_error: Optional[Exception] = None,
        audio: bytes = b"primary-audio",
    ) -> None:
        self.checks = list(
            checks
            or [JobCheck("job-1", JobStatus.COMPLETE, "https://cdn.dodo.test/song.mp3")]
        )
        self.submit_error = submit_error
        self.audio = audio
        self.submitted: List[Dict[str, Any]] = []
        self.polled: List[str] = []
        self.downloaded: List[str] = []

    async def submit_generation(self, prompt, style, duration_minutes, voice_identity=None) -> str:
        self.submitted.append(
            {
                "kind": "generation",
                "prompt": prompt,
                "style": style,
                "duration_minutes": duration_minutes,
                "voice_identity": voice_identity,
            }
        )
        if self.submit_error is not None:
            raise self.submit_error
        return "job-1"

    async def submit_cover(self, vocals: bytes, style: str, prompt: str) -> str:
        self.submitted.append(
            {"kind": "cover", "vocals": vocals, "style": style, "prompt": prompt}
        )
        if self.submit_error is not None:
            raise self.submit_error
        return "job-1"

    async def poll_job(self, job_id: str) -> JobCheck:
        self.polled.append(job_id)
        result = self.checks.pop(0) if len(self.checks) > 1 else self.checks[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def download(self, audio_url: str) -> AudioAsset:
        self.downloaded.append(audio_url)
        return AudioAsset(data=self.audio, content_type="audio/mpeg", source="primary")


class FakeFallback(FallbackProvider):
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.calls = 0

    async def provide(self) -> AudioAsset:
        self.calls += 1
        if not self.available:
            raise FallbackUnavailable("no fallback configured")
        return AudioAsset(data=b"fallback-audio", content_type="audio/wav", source="fallback")

    def validate(self) -> None:
        if not self.available:
            raise FallbackUnavailable("no fallback configured")


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'dodo.db'}")
    await init_models(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def store(session_factory, blobs):
    return build_entity_store(session_factory, blobs)


def make_lullaby_pipeline(
    store,
    *,
    music: Optional[FakeMusic] = None,
    fallback: Optional[FakeFallback] = None,
    speech: Optional[FakeSpeech] = None,
    mode: str = "persona",
    poll_max_attempts: int = 5,
    poll_rounds: int = 2,
) -> LullabyPipeline:
    music = music or FakeMusic()
    return LullabyPipeline(
        store,
        strategy=build_strategy(mode, speech=speech or FakeSpeech(), music=music),
        music=music,
        fallback=fallback or FakeFallback(),
        scheduler=GenerationScheduler(store.jobs, store.lullabies),
        poll_interval=0,
        poll_max_attempts=poll_max_attempts,
        poll_max_consecutive_errors=3,
        poll_rounds=poll_rounds,
        max_duration_minutes=8,
        signed_url_ttl=600,
        sleep=no_sleep,
    )


def make_voice_pipeline(store, cloning: Optional[FakeCloning] = None, **kwargs) -> VoiceProfilePipeline:
    return VoiceProfilePipeline(store, cloning or FakeCloning(), **kwargs)


async def seed_child_and_profile(store, *, voice_id: Optional[str] = "voice-123"):
    child = await store.children.insert(name="Léa", age_months=18)
    profile = await store.voice_profiles.insert(
        status=VoiceProfileStatus.READY,
        external_voice_id=voice_id,
    )
    return child, profile


async def seed_lullaby(store, child, profile, *, status=LullabyStatus.GENERATING, audio_url=None):
    return await store.lullabies.insert(
        child_id=child.id,
        voice_profile_id=profile.id,
        title=f"Lullaby for {child.name}",
        style=LullabyStyle.SOFT,
        duration_minutes=5,
        language_code="fr",
        status=status,
        audio_url=audio_url,
    )
