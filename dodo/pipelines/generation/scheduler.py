"""Detached execution of lullaby pipelines, tracked in the job ledger."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set
from uuid import UUID

from dodo.application.interfaces import JobRepository, RecordRepository
from dodo.domain.errors import StorageError
from dodo.domain.models import GenerationJob, JobState, Lullaby

logger = logging.getLogger("dodo.pipelines.generation")

Runner = Callable[..., Awaitable[Any]]


class GenerationScheduler:
    """Spawn one asyncio task per lullaby and keep the ledger row in step.

    Ledger writes are best-effort: a ledger outage never prevents a lullaby
    from being generated, it only makes that run invisible to the resumption
    sweep.
    """

    def __init__(
        self,
        jobs: JobRepository,
        lullabies: RecordRepository[Lullaby],
    ) -> None:
        self._jobs = jobs
        self._lullabies = lullabies
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active(self) -> int:
        return len(self._tasks)

    async def schedule(self, lullaby_id: UUID, runner: Runner) -> Optional[GenerationJob]:
        job: Optional[GenerationJob] = None
        try:
            job = await self._jobs.insert(
                lullaby_id=lullaby_id,
                state=JobState.QUEUED,
                attempts=0,
            )
        except StorageError:
            logger.exception("Could not record generation job for lullaby %s", lullaby_id)

        self._spawn(
            lullaby_id,
            runner,
            job_id=job.id if job else None,
            attempts=0,
            provider_job_id=None,
        )
        return job

    async def resume_pending(self, runner: Runner) -> int:
        """Re-spawn unfinished jobs whose lullaby is still generating."""

        resumed = 0
        for job in await self._jobs.list_unfinished():
            lullaby = await self._lullabies.get_by_id(job.lullaby_id)
            if lullaby is None or lullaby.status.is_terminal:
                await self._update(
                    job.id,
                    state=JobState.COMPLETED,
                    last_error=None if lullaby else "Lullaby no longer exists",
                )
                continue

            logger.info(
                "Resuming generation for lullaby %s (attempt %d, provider job %s)",
                job.lullaby_id,
                job.attempts + 1,
                job.provider_job_id or "none",
            )
            self._spawn(
                job.lullaby_id,
                runner,
                job_id=job.id,
                attempts=job.attempts,
                provider_job_id=job.provider_job_id,
            )
            resumed += 1
        return resumed

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for running pipelines; cancel whatever outlives ``timeout``."""

        if not self._tasks:
            return
        pending = list(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                "Cancelled %d generation task(s) at shutdown; they will resume on restart",
                len(still_running),
            )
            await asyncio.gather(*still_running, return_exceptions=True)

    def _spawn(
        self,
        lullaby_id: UUID,
        runner: Runner,
        *,
        job_id: Optional[UUID],
        attempts: int,
        provider_job_id: Optional[str],
    ) -> None:
        task = asyncio.create_task(
            self._run(lullaby_id, runner, job_id, attempts, provider_job_id),
            name=f"lullaby-{lullaby_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        lullaby_id: UUID,
        runner: Runner,
        job_id: Optional[UUID],
        attempts: int,
        provider_job_id: Optional[str],
    ) -> None:
        if job_id is not None:
            await self._update(job_id, state=JobState.RUNNING, attempts=attempts + 1)

        error: Optional[str] = None
        try:
            await runner(lullaby_id, job_id=job_id, provider_job_id=provider_job_id)
        except asyncio.CancelledError:
            # Left in RUNNING so the next startup sweep picks it up.
            raise
        except Exception as exc:
            logger.exception("Generation task for lullaby %s crashed", lullaby_id)
            error = str(exc)

        if job_id is not None:
            values: dict[str, Any] = {"state": JobState.COMPLETED}
            if error is not None:
                values["last_error"] = error
            await self._update(job_id, **values)

    async def _update(self, job_id: UUID, **values: Any) -> None:
        try:
            await self._jobs.update_by_id(job_id, **values)
        except StorageError:
            logger.exception("Could not update generation job %s", job_id)


__all__ = ["GenerationScheduler", "Runner"]
