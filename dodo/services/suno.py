"""Suno-compatible music generation gateway."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx

from dodo.application.interfaces import MusicGenerationGateway
from dodo.domain.errors import EndpointNotFound, InvalidRequest, ProviderRejected
from dodo.domain.jobs import JobCheck, JobStatus
from dodo.domain.media import AudioAsset
from dodo.services.provider_http import ensure_success, json_body, send

logger = logging.getLogger(__name__)

PROVIDER = "suno"

MAX_PROMPT_CHARS = 5000
MAX_STYLE_CHARS = 1000
MAX_TITLE_CHARS = 100


class _NotFound:
    """Marker returned by a candidate attempt that hit HTTP 404."""

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


async def first_found(
    candidates: Sequence[str],
    attempt: Callable[[str], Awaitable[Any]],
) -> Any:
    """Run ``attempt`` over ``candidates`` until one does not return NOT_FOUND.

    Any exception stops the walk; only the NOT_FOUND marker advances it.
    """

    for candidate in candidates:
        result = await attempt(candidate)
        if result is NOT_FOUND:
            logger.debug("%s answered 404; trying next candidate", candidate)
            continue
        return result
    return NOT_FOUND


def _check_envelope(payload: dict[str, Any]) -> None:
    code = payload.get("code")
    if code is not None and code != 200:
        raise ProviderRejected(
            PROVIDER,
            f"[{code}] {payload.get('msg') or 'Unknown error'}",
        )


def _first_track(data: dict[str, Any]) -> dict[str, Any]:
    response = data.get("response")
    if isinstance(response, dict):
        tracks = response.get("sunoData") or response.get("data")
        if isinstance(tracks, list) and tracks and isinstance(tracks[0], dict):
            return tracks[0]
    return {}


def normalize_status(raw: Any) -> JobStatus:
    status = str(raw or "").strip().lower()
    if status in {"complete", "completed", "finished", "success"}:
        return JobStatus.COMPLETE
    if "fail" in status or "error" in status:
        return JobStatus.FAILED
    return JobStatus.PENDING


def normalize_task_payload(payload: dict[str, Any], job_id: str) -> JobCheck:
    """Collapse the flat and nested status shapes into a JobCheck."""

    _check_envelope(payload)
    data = payload.get("data")
    if not isinstance(data, dict):
        data = payload

    track = _first_track(data)
    audio_url = (
        track.get("audioUrl")
        or track.get("audio_url")
        or track.get("streamAudioUrl")
        or data.get("audioUrl")
        or data.get("audio_url")
        or data.get("url")
        or data.get("streamUrl")
    )
    status = normalize_status(data.get("status") or track.get("status"))
    detail = data.get("errorMessage") or data.get("error") or payload.get("msg")
    return JobCheck(
        job_id=str(data.get("taskId") or job_id),
        status=status,
        audio_url=str(audio_url) if audio_url else None,
        detail=str(detail) if detail and status is JobStatus.FAILED else None,
    )


def _task_id(payload: dict[str, Any]) -> str:
    _check_envelope(payload)
    data = payload.get("data")
    task_id = None
    if isinstance(data, dict):
        task_id = data.get("taskId") or data.get("task_id")
    task_id = task_id or payload.get("taskId")
    if not task_id:
        raise ProviderRejected(PROVIDER, f"No taskId returned: {payload}")
    return str(task_id)


class SunoGateway(MusicGenerationGateway):
    """Submit, poll and download generations on a Suno-compatible API."""

    provider_name = PROVIDER

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str | None,
        base_url: str = "https://api.sunoapi.org",
        model: str = "V4_5ALL",
        callback_url: str = "https://api.example.com/callback",
        generate_path: str = "/api/v1/generate",
        status_paths: Sequence[str] = ("/api/v1/generate/record-info?taskId={job_id}",),
        cover_paths: Sequence[str] = ("/api/v1/generate/upload-cover",),
        max_duration_minutes: float = 8.0,
        submit_timeout: float = 30.0,
        status_timeout: float = 10.0,
        upload_timeout: float = 60.0,
        download_timeout: float = 60.0,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._callback_url = callback_url
        self._generate_path = generate_path
        self._status_paths = list(status_paths)
        self._cover_paths = list(cover_paths)
        self._max_duration = max_duration_minutes
        self._submit_timeout = submit_timeout
        self._status_timeout = status_timeout
        self._upload_timeout = upload_timeout
        self._download_timeout = download_timeout

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ProviderRejected(PROVIDER, "SUNO_API_KEY is not set")
        return {"Authorization": f"Bearer {self._api_key}"}

    def _validate(self, style: str, duration_minutes: float) -> None:
        if not style or not style.strip():
            raise InvalidRequest(PROVIDER, "A style is required")
        if duration_minutes <= 0:
            raise InvalidRequest(PROVIDER, "Duration must be positive")
        if duration_minutes > self._max_duration:
            raise InvalidRequest(
                PROVIDER,
                f"Duration {duration_minutes} exceeds the {self._max_duration} minute maximum",
            )

    async def submit_generation(
        self,
        prompt: str,
        style: str,
        duration_minutes: float,
        voice_identity: Optional[str] = None,
    ) -> str:
        self._validate(style, duration_minutes)
        if not prompt.strip():
            raise InvalidRequest(PROVIDER, "A prompt is required")

        payload: dict[str, Any] = {
            "customMode": True,
            "instrumental": False,
            "model": self._model,
            "callBackUrl": self._callback_url,
            "prompt": prompt[:MAX_PROMPT_CHARS],
            "style": style[:MAX_STYLE_CHARS],
            "title": f"Lullaby - {style}"[:MAX_TITLE_CHARS],
        }
        if voice_identity:
            payload["personaId"] = voice_identity

        logger.info(
            "Submitting generation (style=%s, duration=%.1f min, persona=%s)",
            style,
            duration_minutes,
            voice_identity or "none",
        )
        response = await send(
            self._client,
            PROVIDER,
            "POST",
            f"{self._base_url}{self._generate_path}",
            headers=self._headers(),
            json=payload,
            timeout=self._submit_timeout,
        )
        ensure_success(PROVIDER, response)
        task_id = _task_id(json_body(PROVIDER, response))
        logger.info("Generation task accepted: %s", task_id)
        return task_id

    async def submit_cover(self, vocals: bytes, style: str, prompt: str) -> str:
        if not vocals:
            raise InvalidRequest(PROVIDER, "Vocal track is empty")
        if not style or not style.strip():
            raise InvalidRequest(PROVIDER, "A style is required")
        headers = self._headers()

        async def attempt(path: str) -> Any:
            response = await send(
                self._client,
                PROVIDER,
                "POST",
                f"{self._base_url}{path}",
                headers=headers,
                data={
                    "style": style[:MAX_STYLE_CHARS],
                    "prompt": prompt[:MAX_PROMPT_CHARS],
                },
                files={"audio": ("vocals.mp3", vocals, "audio/mpeg")},
                timeout=self._upload_timeout,
            )
            if response.status_code == 404:
                return NOT_FOUND
            ensure_success(PROVIDER, response)
            return _task_id(json_body(PROVIDER, response))

        task_id = await first_found(self._cover_paths, attempt)
        if task_id is NOT_FOUND:
            raise EndpointNotFound(
                PROVIDER,
                "Every cover endpoint answered 404",
                status_code=404,
            )
        logger.info("Cover task accepted: %s", task_id)
        return task_id

    async def poll_job(self, job_id: str) -> JobCheck:
        headers = self._headers()

        async def attempt(template: str) -> Any:
            response = await send(
                self._client,
                PROVIDER,
                "GET",
                f"{self._base_url}{template.format(job_id=job_id)}",
                headers=headers,
                timeout=self._status_timeout,
            )
            if response.status_code == 404:
                return NOT_FOUND
            ensure_success(PROVIDER, response)
            return normalize_task_payload(json_body(PROVIDER, response), job_id)

        result = await first_found(self._status_paths, attempt)
        if result is NOT_FOUND:
            raise EndpointNotFound(
                PROVIDER,
                f"Every status endpoint answered 404 for task {job_id}",
                status_code=404,
            )
        return result

    async def download(self, audio_url: str) -> AudioAsset:
        response = await send(
            self._client,
            PROVIDER,
            "GET",
            audio_url,
            timeout=self._download_timeout,
            follow_redirects=True,
        )
        ensure_success(PROVIDER, response)
        if not response.content:
            raise ProviderRejected(PROVIDER, f"Downloaded audio is empty: {audio_url}")
        content_type = response.headers.get("content-type", "audio/mpeg").split(";")[0]
        return AudioAsset(data=response.content, content_type=content_type, source="primary")


__all__ = [
    "SunoGateway",
    "NOT_FOUND",
    "first_found",
    "normalize_status",
    "normalize_task_payload",
]
