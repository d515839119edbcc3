"""Bounded polling behaviour."""

from __future__ import annotations

import pytest

from dodo.domain.jobs import JobCheck, JobStatus
from dodo.services.polling import PollOutcomeKind, poll_until_terminal


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def scripted_check(results):
    calls: list[str] = []
    queue = list(results)

    async def check(job_id: str) -> JobCheck:
        calls.append(job_id)
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    return check, calls


@pytest.mark.asyncio
@pytest.mark.parametrize("pending_count", [0, 1, 4])
async def test_pending_then_complete_takes_n_plus_one_checks(pending_count):
    pending = JobCheck("job", JobStatus.PENDING)
    done = JobCheck("job", JobStatus.COMPLETE, audio_url="https://cdn.test/a.mp3")
    check, calls = scripted_check([pending] * pending_count + [done])
    sleep = SleepRecorder()

    outcome = await poll_until_terminal("job", check, interval=5, max_attempts=60, sleep=sleep)

    assert outcome.kind is PollOutcomeKind.COMPLETE
    assert outcome.audio_url == "https://cdn.test/a.mp3"
    assert len(calls) == pending_count + 1
    assert outcome.attempts == pending_count + 1
    assert sleep.calls == [5] * pending_count


@pytest.mark.asyncio
async def test_ten_consecutive_errors_exhaust_without_raising():
    check, calls = scripted_check([RuntimeError("status endpoint down")])

    outcome = await poll_until_terminal(
        "job", check, interval=1, max_attempts=60, sleep=SleepRecorder()
    )

    assert outcome.kind is PollOutcomeKind.EXHAUSTED
    assert len(calls) == 10
    assert "status endpoint down" in (outcome.last_error or "")


@pytest.mark.asyncio
async def test_successful_check_resets_error_streak():
    boom = RuntimeError("flaky")
    pending = JobCheck("job", JobStatus.PENDING)
    done = JobCheck("job", JobStatus.COMPLETE, audio_url="https://cdn.test/a.mp3")
    check, calls = scripted_check([boom, boom, pending, boom, boom, done])

    outcome = await poll_until_terminal(
        "job",
        check,
        interval=0,
        max_attempts=20,
        max_consecutive_errors=3,
        sleep=SleepRecorder(),
    )

    assert outcome.kind is PollOutcomeKind.COMPLETE
    assert len(calls) == 6


@pytest.mark.asyncio
async def test_budget_exhausted_while_pending_is_still_pending():
    check, calls = scripted_check([JobCheck("job", JobStatus.PENDING)])

    outcome = await poll_until_terminal(
        "job", check, interval=2, max_attempts=4, sleep=SleepRecorder()
    )

    assert outcome.kind is PollOutcomeKind.STILL_PENDING
    assert outcome.attempts == 4
    assert len(calls) == 4


@pytest.mark.asyncio
async def test_pending_with_audio_url_is_accepted_early():
    streaming = JobCheck("job", JobStatus.PENDING, audio_url="https://cdn.test/stream.mp3")
    check, calls = scripted_check([streaming])

    outcome = await poll_until_terminal(
        "job", check, interval=5, max_attempts=60, sleep=SleepRecorder()
    )

    assert outcome.succeeded
    assert outcome.audio_url == "https://cdn.test/stream.mp3"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_provider_failure_is_terminal():
    check, calls = scripted_check(
        [JobCheck("job", JobStatus.PENDING), JobCheck("job", JobStatus.FAILED, detail="quota")]
    )

    outcome = await poll_until_terminal(
        "job", check, interval=0, max_attempts=60, sleep=SleepRecorder()
    )

    assert outcome.kind is PollOutcomeKind.FAILED
    assert outcome.last_error == "quota"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_complete_without_url_keeps_polling():
    check, calls = scripted_check(
        [
            JobCheck("job", JobStatus.COMPLETE),
            JobCheck("job", JobStatus.COMPLETE, audio_url="https://cdn.test/a.mp3"),
        ]
    )

    outcome = await poll_until_terminal(
        "job", check, interval=0, max_attempts=5, sleep=SleepRecorder()
    )

    assert outcome.kind is PollOutcomeKind.COMPLETE
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_rejects_empty_budget():
    check, _ = scripted_check([JobCheck("job", JobStatus.PENDING)])

    with pytest.raises(ValueError):
        await poll_until_terminal("job", check, interval=0, max_attempts=0)
