"""Voice profile onboarding: store samples, clone a voice, settle the status."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence
from uuid import UUID

from fastapi.concurrency import run_in_threadpool

from dodo.application.interfaces import EntityStore, VoiceCloningGateway
from dodo.domain.errors import StorageError, ValidationError
from dodo.domain.media import AudioSample
from dodo.domain.models import VoiceProfile, VoiceProfileStatus
from dodo.telemetry import record_voice_clone

logger = logging.getLogger("dodo.pipelines.generation")


def sample_blob_path(profile_id: UUID, sequence: int) -> str:
    return f"voices/{profile_id}/source-{sequence}"


class VoiceProfilePipeline:
    """Runs synchronously inside the onboarding request.

    Storage failures while staging samples mark the profile ``error`` and
    propagate. Cloning failures never do: the profile still becomes ``ready``,
    only without a voice identity, and nothing retries it later.
    """

    def __init__(
        self,
        store: EntityStore,
        cloning: VoiceCloningGateway,
        *,
        reuse_voice_id: Optional[str] = None,
        name_prefix: str = "DODO Voice",
    ) -> None:
        self._store = store
        self._cloning = cloning
        self._reuse_voice_id = reuse_voice_id
        self._name_prefix = name_prefix

    async def create(self, samples: Sequence[AudioSample]) -> VoiceProfile:
        if not samples:
            raise ValidationError("At least one audio sample is required")

        profile = await self._store.voice_profiles.insert(
            status=VoiceProfileStatus.PROCESSING,
            external_voice_id=None,
        )
        logger.info("Voice profile %s created from %d sample(s)", profile.id, len(samples))

        with tempfile.TemporaryDirectory(prefix=f"dodo-voice-{profile.id}-") as workdir:
            try:
                local_paths = await self._stage_samples(profile.id, samples, Path(workdir))
            except (StorageError, OSError) as exc:
                logger.exception("Could not store samples for voice profile %s", profile.id)
                await self._mark_error(profile.id)
                record_voice_clone("error")
                if isinstance(exc, StorageError):
                    raise
                raise StorageError(f"Could not stage voice samples: {exc}") from exc

            voice_id = await self._obtain_identity(profile.id, local_paths)

        try:
            updated = await self._store.voice_profiles.update_by_id(
                profile.id,
                status=VoiceProfileStatus.READY,
                external_voice_id=voice_id,
            )
        except StorageError:
            logger.exception("Could not finalize voice profile %s", profile.id)
            await self._mark_error(profile.id)
            raise

        if updated is None:
            raise StorageError(f"Voice profile {profile.id} disappeared during onboarding")
        return updated

    async def get(self, profile_id: UUID) -> Optional[VoiceProfile]:
        return await self._store.voice_profiles.get_by_id(profile_id)

    async def _stage_samples(
        self,
        profile_id: UUID,
        samples: Sequence[AudioSample],
        workdir: Path,
    ) -> List[Path]:
        local_paths: List[Path] = []
        for sequence, sample in enumerate(samples, start=1):
            await self._store.blobs.put_blob(
                sample_blob_path(profile_id, sequence),
                sample.data,
                sample.content_type,
            )
            local_path = workdir / f"source-{sequence}{sample.extension}"
            await run_in_threadpool(local_path.write_bytes, sample.data)
            local_paths.append(local_path)
        return local_paths

    async def _obtain_identity(
        self,
        profile_id: UUID,
        local_paths: Sequence[Path],
    ) -> Optional[str]:
        if self._reuse_voice_id:
            logger.info("Assigning configured voice identity to profile %s", profile_id)
            record_voice_clone("reused")
            return self._reuse_voice_id

        try:
            voice_id = await self._cloning.clone_voice(
                local_paths,
                name=f"{self._name_prefix} {profile_id}",
            )
        except Exception as exc:
            logger.warning(
                "Voice cloning failed for profile %s; continuing without a voice identity: %s",
                profile_id,
                exc,
            )
            record_voice_clone("degraded")
            return None

        record_voice_clone("cloned")
        return voice_id

    async def _mark_error(self, profile_id: UUID) -> None:
        try:
            await self._store.voice_profiles.update_by_id(
                profile_id,
                status=VoiceProfileStatus.ERROR,
            )
        except StorageError:
            logger.exception("Could not mark voice profile %s as error", profile_id)


__all__ = ["VoiceProfilePipeline", "sample_blob_path"]
