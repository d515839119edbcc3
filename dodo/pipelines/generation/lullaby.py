"""Lullaby generation orchestrator.

``create`` persists a ``generating`` record and hands the id to the
scheduler. ``run`` is the detached part: resolve the voice identity, try the
configured primary strategy, fall back to the static asset, persist the
audio and settle the record as ``ready`` or ``failed``. Nothing raised inside
``run`` escapes it; every failure ends as a record status.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple
from uuid import UUID

from dodo.application.interfaces import (
    EntityStore,
    FallbackProvider,
    MusicGenerationGateway,
)
from dodo.domain.errors import (
    PollingExhausted,
    ProviderError,
    ProviderRejected,
    StorageError,
    ValidationError,
)
from dodo.domain.media import AudioAsset
from dodo.domain.models import Lullaby, LullabyStatus, LullabyStyle
from dodo.services.polling import PollOutcome, PollOutcomeKind, poll_until_terminal
from dodo.telemetry import record_lullaby_outcome

from .prompts import build_lullaby_prompt
from .scheduler import GenerationScheduler
from .strategies import GenerationStrategy

logger = logging.getLogger("dodo.pipelines.generation")


def lullaby_blob_path(lullaby_id: UUID) -> str:
    return f"lullabies/{lullaby_id}"


class LullabyPipeline:
    def __init__(
        self,
        store: EntityStore,
        *,
        strategy: GenerationStrategy,
        music: MusicGenerationGateway,
        fallback: FallbackProvider,
        scheduler: GenerationScheduler,
        poll_interval: float = 5.0,
        poll_max_attempts: int = 60,
        poll_max_consecutive_errors: int = 10,
        poll_rounds: int = 2,
        max_duration_minutes: float = 8.0,
        signed_url_ttl: int = 3600 * 24 * 7,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._strategy = strategy
        self._music = music
        self._fallback = fallback
        self._scheduler = scheduler
        self._poll_interval = poll_interval
        self._poll_max_attempts = poll_max_attempts
        self._poll_max_consecutive_errors = poll_max_consecutive_errors
        self._poll_rounds = poll_rounds
        self._max_duration = max_duration_minutes
        self._signed_url_ttl = signed_url_ttl
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Request-side operations
    # ------------------------------------------------------------------

    async def create(
        self,
        *,
        child_id: UUID,
        voice_profile_id: UUID,
        style: LullabyStyle,
        duration_minutes: float,
        language_code: str,
    ) -> Lullaby:
        if duration_minutes <= 0:
            raise ValidationError("durationMinutes must be greater than 0")
        if not language_code or not language_code.strip():
            raise ValidationError("languageCode is required")

        child = await self._store.children.get_by_id(child_id)
        if child is None:
            raise ValidationError(f"Unknown childId {child_id}")
        profile = await self._store.voice_profiles.get_by_id(voice_profile_id)
        if profile is None:
            raise ValidationError(f"Unknown voiceProfileId {voice_profile_id}")

        lullaby = await self._store.lullabies.insert(
            child_id=child_id,
            voice_profile_id=voice_profile_id,
            title=f"Lullaby for {child.name}",
            style=style,
            duration_minutes=duration_minutes,
            language_code=language_code.strip(),
            status=LullabyStatus.GENERATING,
            audio_url=None,
        )
        logger.info(
            "Lullaby %s queued (style=%s, duration=%.1f min, language=%s)",
            lullaby.id,
            style.value,
            duration_minutes,
            lullaby.language_code,
        )
        await self._scheduler.schedule(lullaby.id, self.run)
        return lullaby

    async def get(self, lullaby_id: UUID) -> Optional[Lullaby]:
        return await self._store.lullabies.get_by_id(lullaby_id)

    async def list(self) -> List[Lullaby]:
        return await self._store.lullabies.list(newest_first=True)

    # ------------------------------------------------------------------
    # Background run
    # ------------------------------------------------------------------

    async def run(
        self,
        lullaby_id: UUID,
        *,
        job_id: Optional[UUID] = None,
        provider_job_id: Optional[str] = None,
    ) -> Optional[Lullaby]:
        try:
            lullaby = await self._store.lullabies.get_by_id(lullaby_id)
            if lullaby is None:
                logger.warning("Lullaby %s vanished before generation started", lullaby_id)
                return None
            if lullaby.status.is_terminal:
                logger.info("Lullaby %s already %s; nothing to do", lullaby_id, lullaby.status.value)
                return lullaby

            asset = await self._produce_audio(lullaby, job_id, provider_job_id)
            audio_url = await self._persist_audio(lullaby.id, asset)
            finished, written = await self._settle(lullaby.id, LullabyStatus.READY, audio_url)
            if written:
                record_lullaby_outcome(LullabyStatus.READY.value, asset.source)
                logger.info("Lullaby %s ready (%s audio)", lullaby_id, asset.source)
            return finished
        except Exception as exc:
            logger.exception("Generation failed for lullaby %s", lullaby_id)
            return await self._fail(lullaby_id, job_id, exc)

    async def _produce_audio(
        self,
        lullaby: Lullaby,
        job_id: Optional[UUID],
        provider_job_id: Optional[str],
    ) -> AudioAsset:
        voice_identity = await self._resolve_voice_identity(lullaby.voice_profile_id)
        if not voice_identity:
            logger.info("No voice identity for lullaby %s; using fallback audio", lullaby.id)
            return await self._fallback.provide()

        try:
            return await self._generate_primary(lullaby, voice_identity, job_id, provider_job_id)
        except (ProviderError, PollingExhausted) as exc:
            logger.warning(
                "Primary generation failed for lullaby %s; using fallback audio: %s",
                lullaby.id,
                exc,
            )
            return await self._fallback.provide()

    async def _generate_primary(
        self,
        lullaby: Lullaby,
        voice_identity: str,
        job_id: Optional[UUID],
        provider_job_id: Optional[str],
    ) -> AudioAsset:
        if provider_job_id:
            logger.info("Resuming provider job %s for lullaby %s", provider_job_id, lullaby.id)
        else:
            prompt = build_lullaby_prompt(
                lullaby.style,
                lullaby.language_code,
                lullaby.duration_minutes,
                max_duration_minutes=self._max_duration,
                child_name=await self._child_name(lullaby.child_id),
            )
            provider_job_id = await self._strategy.submit(voice_identity, prompt)
            logger.info(
                "Lullaby %s submitted with %s strategy as provider job %s",
                lullaby.id,
                self._strategy.name,
                provider_job_id,
            )
            await self._record_provider_job(job_id, provider_job_id)

        outcome = await self._poll(provider_job_id)
        return await self._music.download(outcome.audio_url or "")

    async def _poll(self, provider_job_id: str) -> PollOutcome:
        """Poll for up to ``poll_rounds`` rounds while the job stays pending."""

        for round_number in range(1, self._poll_rounds + 1):
            outcome = await poll_until_terminal(
                provider_job_id,
                self._music.poll_job,
                interval=self._poll_interval,
                max_attempts=self._poll_max_attempts,
                max_consecutive_errors=self._poll_max_consecutive_errors,
                sleep=self._sleep,
            )
            if outcome.kind is PollOutcomeKind.COMPLETE:
                return outcome
            if outcome.kind is PollOutcomeKind.FAILED:
                raise ProviderRejected(
                    self._music.provider_name,
                    outcome.last_error or f"Job {provider_job_id} failed",
                )
            if outcome.kind is PollOutcomeKind.EXHAUSTED:
                raise PollingExhausted(
                    provider_job_id,
                    f"Status checks for job {provider_job_id} kept failing: {outcome.last_error}",
                )
            logger.info(
                "Provider job %s still pending after round %d/%d",
                provider_job_id,
                round_number,
                self._poll_rounds,
            )

        raise PollingExhausted(
            provider_job_id,
            f"Job {provider_job_id} still pending after {self._poll_rounds} polling round(s)",
        )

    async def _persist_audio(self, lullaby_id: UUID, asset: AudioAsset) -> str:
        path = lullaby_blob_path(lullaby_id)
        await self._store.blobs.put_blob(path, asset.data, asset.content_type)
        signed_url = await self._store.blobs.get_signed_url(path, self._signed_url_ttl)
        if signed_url:
            return signed_url
        logger.info("Signed URL unavailable for %s; using public URL", path)
        return self._store.blobs.get_public_url(path)

    async def _settle(
        self,
        lullaby_id: UUID,
        status: LullabyStatus,
        audio_url: Optional[str],
    ) -> Tuple[Optional[Lullaby], bool]:
        """Apply a terminal status unless another run already settled the record.

        Returns the stored record and whether this call wrote the status.
        """

        written = await self._store.lullabies.settle(
            lullaby_id,
            status=status,
            audio_url=audio_url,
        )
        current = await self._store.lullabies.get_by_id(lullaby_id)
        if not written and current is not None:
            logger.info(
                "Lullaby %s is already %s; keeping it",
                lullaby_id,
                current.status.value,
            )
        return current, written

    async def _fail(
        self,
        lullaby_id: UUID,
        job_id: Optional[UUID],
        exc: Exception,
    ) -> Optional[Lullaby]:
        if job_id is not None:
            await self._record_job_error(job_id, str(exc))
        try:
            failed, written = await self._settle(lullaby_id, LullabyStatus.FAILED, None)
        except Exception:
            logger.exception("Could not mark lullaby %s as failed", lullaby_id)
            return None
        if written:
            record_lullaby_outcome(LullabyStatus.FAILED.value)
        return failed

    async def _resolve_voice_identity(self, voice_profile_id: UUID) -> Optional[str]:
        try:
            profile = await self._store.voice_profiles.get_by_id(voice_profile_id)
        except StorageError as exc:
            logger.warning("Could not read voice profile %s: %s", voice_profile_id, exc)
            return None
        return profile.external_voice_id if profile else None

    async def _child_name(self, child_id: UUID) -> Optional[str]:
        try:
            child = await self._store.children.get_by_id(child_id)
        except StorageError as exc:
            logger.warning("Could not read child %s: %s", child_id, exc)
            return None
        return child.name if child else None

    async def _record_provider_job(self, job_id: Optional[UUID], provider_job_id: str) -> None:
        if job_id is None:
            return
        try:
            await self._store.jobs.update_by_id(job_id, provider_job_id=provider_job_id)
        except StorageError:
            logger.exception("Could not record provider job %s on ledger %s", provider_job_id, job_id)

    async def _record_job_error(self, job_id: UUID, message: str) -> None:
        try:
            await self._store.jobs.update_by_id(job_id, last_error=message[:2000])
        except StorageError:
            logger.exception("Could not record failure on ledger %s", job_id)


__all__ = ["LullabyPipeline", "lullaby_blob_path"]
