"""Normalized view of a provider-side asynchronous job."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class JobCheck:
    """One status observation of a provider job."""

    job_id: str
    status: JobStatus
    audio_url: str | None = None
    detail: str | None = None


__all__ = ["JobStatus", "JobCheck"]
