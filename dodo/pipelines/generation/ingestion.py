"""Upload ingestion helpers for voice samples."""

from __future__ import annotations

import mimetypes
from typing import Final, Sequence

from fastapi import HTTPException, UploadFile, status

from dodo.domain.media import AudioSample

MAX_SAMPLES: Final[int] = 3
MAX_SAMPLE_BYTES: Final[int] = 10 * 1024 * 1024


def resolve_content_type(audio_file: UploadFile) -> str:
    """Accept any ``audio/*`` upload, guessing from the filename when needed."""

    content_type = (audio_file.content_type or "").split(";")[0].strip().lower()
    if not content_type.startswith("audio/") and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        if guessed_type:
            content_type = guessed_type

    if not content_type.startswith("audio/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File '{audio_file.filename}' is not an audio file",
        )
    return content_type


async def read_sample(audio_file: UploadFile) -> AudioSample:
    """Load the upload fully into memory, rejecting empty or oversized payloads."""

    content_type = resolve_content_type(audio_file)
    audio_bytes = await audio_file.read(MAX_SAMPLE_BYTES + 1)
    await audio_file.close()

    if not audio_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded audio file '{audio_file.filename}' is empty",
        )
    if len(audio_bytes) > MAX_SAMPLE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Uploaded audio file '{audio_file.filename}' exceeds 10 MB",
        )
    return AudioSample(
        data=audio_bytes,
        content_type=content_type,
        filename=audio_file.filename,
    )


async def collect_samples(audio_files: Sequence[UploadFile] | None) -> list[AudioSample]:
    if not audio_files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one audio file is required",
        )
    if len(audio_files) > MAX_SAMPLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_SAMPLES} audio files are accepted",
        )
    return [await read_sample(audio_file) for audio_file in audio_files]


__all__ = [
    "MAX_SAMPLES",
    "MAX_SAMPLE_BYTES",
    "collect_samples",
    "read_sample",
    "resolve_content_type",
]
