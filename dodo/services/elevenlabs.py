"""ElevenLabs gateway for voice cloning and speech synthesis."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from urllib.parse import urlparse
from typing import Any, Sequence

import httpx
from fastapi.concurrency import run_in_threadpool

from dodo.application.interfaces import (
    SampleSource,
    SpeechSynthesisGateway,
    VoiceCloningGateway,
)
from dodo.domain.errors import InvalidRequest, ProviderRejected
from dodo.services.provider_http import ensure_success, json_body, send

logger = logging.getLogger(__name__)

PROVIDER = "elevenlabs"


def normalize_clone_response(payload: dict[str, Any]) -> str:
    """Return the voice identity from an `/voices/add` response."""

    voice_id = payload.get("voice_id") or payload.get("voiceId")
    if not voice_id:
        raise ProviderRejected(PROVIDER, f"No voice_id in clone response: {payload}")
    return str(voice_id)


def sample_part(sample: SampleSource, index: int, data: bytes) -> tuple[str, bytes, str]:
    """Multipart ``(filename, data, content_type)`` named after the sample itself."""

    location = str(sample)
    if location.startswith(("http://", "https://")):
        location = urlparse(location).path
    filename = Path(location).name or f"sample-{index}.m4a"
    content_type, _ = mimetypes.guess_type(filename)
    return filename, data, content_type or "audio/m4a"


class ElevenLabsGateway(VoiceCloningGateway, SpeechSynthesisGateway):
    """Thin request/response wrapper around the ElevenLabs REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "eleven_multilingual_v2",
        stability: float = 0.5,
        similarity_boost: float = 0.75,
        clone_timeout: float = 120.0,
        request_timeout: float = 60.0,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_id = model_id
        self._voice_settings = {
            "stability": stability,
            "similarity_boost": similarity_boost,
        }
        self._clone_timeout = clone_timeout
        self._request_timeout = request_timeout

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ProviderRejected(PROVIDER, "ELEVENLABS_API_KEY is not set")
        return {"xi-api-key": self._api_key}

    async def clone_voice(self, samples: Sequence[SampleSource], name: str) -> str:
        if not samples:
            raise InvalidRequest(PROVIDER, "At least one voice sample is required")
        headers = self._headers()

        files = []
        for index, sample in enumerate(samples, start=1):
            data = await self._read_sample(sample)
            files.append(("files", sample_part(sample, index, data)))

        logger.info("Cloning voice '%s' from %d samples", name, len(files))
        response = await send(
            self._client,
            PROVIDER,
            "POST",
            f"{self._base_url}/voices/add",
            headers=headers,
            data={"name": name},
            files=files,
            timeout=self._clone_timeout,
        )
        ensure_success(PROVIDER, response)
        voice_id = normalize_clone_response(json_body(PROVIDER, response))
        logger.info("Voice cloned: %s", voice_id)
        return voice_id

    async def synthesize(self, voice_id: str, text: str) -> bytes:
        if not text.strip():
            raise InvalidRequest(PROVIDER, "Cannot synthesize empty text")
        response = await send(
            self._client,
            PROVIDER,
            "POST",
            f"{self._base_url}/text-to-speech/{voice_id}",
            headers={**self._headers(), "Accept": "audio/mpeg"},
            json={
                "text": text,
                "model_id": self._model_id,
                "voice_settings": self._voice_settings,
            },
            timeout=self._request_timeout,
        )
        ensure_success(PROVIDER, response)
        if not response.content:
            raise ProviderRejected(PROVIDER, "Speech synthesis returned no audio")
        return response.content

    async def _read_sample(self, sample: SampleSource) -> bytes:
        """Load a sample from an http(s) URL or a local path that must exist now."""

        location = str(sample)
        if location.startswith(("http://", "https://")):
            response = await send(
                self._client,
                PROVIDER,
                "GET",
                location,
                timeout=self._request_timeout,
            )
            ensure_success(PROVIDER, response)
            return response.content

        path = Path(location)
        if not path.is_file():
            raise InvalidRequest(PROVIDER, f"Audio file not found: {location}")
        return await run_in_threadpool(path.read_bytes)


__all__ = ["ElevenLabsGateway", "normalize_clone_response", "sample_part"]
