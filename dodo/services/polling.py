"""Bounded polling of asynchronous provider jobs.

The engine checks first and sleeps a fixed ``interval`` between checks. A
fixed interval keeps the wall-clock budget predictable (``interval *
max_attempts``); exponential backoff with jitter is the natural next step if
providers start rate limiting status calls.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from dodo.domain.jobs import JobCheck, JobStatus
from dodo.telemetry import record_poll_check

logger = logging.getLogger(__name__)

CheckFn = Callable[[str], Awaitable[JobCheck]]
SleepFn = Callable[[float], Awaitable[None]]


class PollOutcomeKind(str, Enum):
    COMPLETE = "complete"
    FAILED = "failed"
    EXHAUSTED = "exhausted"
    STILL_PENDING = "still_pending"


@dataclass(frozen=True)
class PollOutcome:
    """Terminal result of one polling round."""

    kind: PollOutcomeKind
    job_id: str
    attempts: int
    audio_url: Optional[str] = None
    last_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.kind is PollOutcomeKind.COMPLETE


async def poll_until_terminal(
    job_id: str,
    check: CheckFn,
    *,
    interval: float,
    max_attempts: int,
    max_consecutive_errors: int = 10,
    sleep: SleepFn = asyncio.sleep,
) -> PollOutcome:
    """Poll ``check(job_id)`` until complete, failed, or out of budget.

    A pending observation that already carries an audio URL is accepted as an
    early success. Exceptions raised by ``check`` count against
    ``max_consecutive_errors`` (reset by any successful check) and never
    propagate; running out of that sub-budget yields ``EXHAUSTED``. Running out
    of ``max_attempts`` while the job is still pending yields ``STILL_PENDING``.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    consecutive_errors = 0
    last_error: Optional[str] = None
    attempts = 0

    while attempts < max_attempts:
        if attempts:
            await sleep(interval)
        attempts += 1

        try:
            result = await check(job_id)
        except Exception as exc:
            consecutive_errors += 1
            last_error = str(exc)
            record_poll_check("error")
            logger.warning(
                "Status check %d for job %s failed (%d consecutive): %s",
                attempts,
                job_id,
                consecutive_errors,
                exc,
            )
            if consecutive_errors >= max_consecutive_errors:
                return PollOutcome(
                    PollOutcomeKind.EXHAUSTED,
                    job_id,
                    attempts,
                    last_error=last_error,
                )
            continue

        consecutive_errors = 0
        record_poll_check(result.status.value)

        if result.status is JobStatus.FAILED:
            return PollOutcome(
                PollOutcomeKind.FAILED,
                job_id,
                attempts,
                last_error=result.detail or "Provider reported failure",
            )
        if result.audio_url:
            if result.status is JobStatus.PENDING:
                logger.info("Job %s exposed audio before completion; accepting it", job_id)
            return PollOutcome(
                PollOutcomeKind.COMPLETE,
                job_id,
                attempts,
                audio_url=result.audio_url,
            )
        if result.status is JobStatus.COMPLETE:
            # Completed without a URL; keep asking until one appears.
            logger.info("Job %s reported complete without audio yet", job_id)

    logger.info("Job %s still pending after %d checks", job_id, attempts)
    return PollOutcome(
        PollOutcomeKind.STILL_PENDING,
        job_id,
        attempts,
        last_error=last_error,
    )


__all__ = ["PollOutcome", "PollOutcomeKind", "poll_until_terminal"]
