"""Value objects for audio moving between providers, storage, and pipelines."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AudioSample:
    """One uploaded voice recording."""

    data: bytes
    content_type: str = "audio/m4a"
    filename: str | None = None

    @property
    def extension(self) -> str:
        if self.filename and Path(self.filename).suffix:
            return Path(self.filename).suffix
        return mimetypes.guess_extension(self.content_type) or ".m4a"


@dataclass(frozen=True)
class AudioAsset:
    """Playable audio bytes plus where they came from (`primary` or `fallback`)."""

    data: bytes
    content_type: str
    source: str


@dataclass(frozen=True)
class StoredBlob:
    """Reference to an object written to the blob store."""

    path: str
    content_type: str
    size: int


__all__ = ["AudioSample", "AudioAsset", "StoredBlob"]
