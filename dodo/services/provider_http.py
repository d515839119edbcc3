"""httpx helpers that map provider transport errors onto the error taxonomy."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from dodo.domain.errors import ProviderRejected, ProviderUnavailable

logger = logging.getLogger(__name__)

_MAX_RAW_MESSAGE = 500


def extract_error_message(response: httpx.Response) -> str:
    """Pull the provider's own explanation out of an error body."""

    try:
        payload: Any = response.json()
    except (json.JSONDecodeError, ValueError):
        text = response.text.strip()
        return text[:_MAX_RAW_MESSAGE] or response.reason_phrase or "Unknown error"

    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        for key in ("msg", "message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
            if value:
                return str(value)
    if isinstance(payload, str) and payload:
        return payload[:_MAX_RAW_MESSAGE]
    return json.dumps(payload)[:_MAX_RAW_MESSAGE]


async def send(
    client: httpx.AsyncClient,
    provider: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """Issue a request, converting transport failures into ProviderUnavailable."""

    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise ProviderUnavailable(provider, f"Timed out calling {url}: {exc!r}") from exc
    except httpx.RequestError as exc:
        raise ProviderUnavailable(
            provider, f"Network error calling {url}: {exc!r}"
        ) from exc


def ensure_success(provider: str, response: httpx.Response) -> httpx.Response:
    """Raise the taxonomy error matching a non-2xx response."""

    if response.is_success:
        return response

    message = extract_error_message(response)
    logger.warning(
        "%s answered HTTP %s for %s: %s",
        provider,
        response.status_code,
        response.request.url if response.request else "?",
        message,
    )
    if response.status_code >= 500:
        raise ProviderUnavailable(provider, message, status_code=response.status_code)
    raise ProviderRejected(provider, message, status_code=response.status_code)


def json_body(provider: str, response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body or raise ProviderRejected."""

    try:
        payload = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise ProviderRejected(
            provider,
            f"Expected JSON but received: {response.text[:_MAX_RAW_MESSAGE]!r}",
            status_code=response.status_code,
        ) from exc
    if not isinstance(payload, dict):
        raise ProviderRejected(
            provider,
            f"Expected a JSON object but received: {str(payload)[:_MAX_RAW_MESSAGE]}",
            status_code=response.status_code,
        )
    return payload


__all__ = ["extract_error_message", "send", "ensure_success", "json_body"]
