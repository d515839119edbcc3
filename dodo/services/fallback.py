"""Deterministic fallback audio used when primary generation cannot finish."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from dodo.application.interfaces import FallbackProvider
from dodo.domain.errors import FallbackUnavailable
from dodo.domain.media import AudioAsset

logger = logging.getLogger(__name__)


class StaticAssetFallbackProvider(FallbackProvider):
    """Serve a bundled audio file, or download a configured static URL."""

    def __init__(
        self,
        *,
        asset_path: Optional[str | Path] = None,
        url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._asset_path = Path(asset_path) if asset_path else None
        self._url = url
        self._client = client
        self._timeout = timeout

    def _bundled_asset(self) -> Optional[Path]:
        if self._asset_path is not None and self._asset_path.is_file():
            return self._asset_path
        return None

    def validate(self) -> None:
        if self._bundled_asset() is None and not self._url:
            raise FallbackUnavailable(
                "No bundled fallback asset at "
                f"{self._asset_path} and FALLBACK_URL is not configured"
            )

    async def provide(self) -> AudioAsset:
        asset = self._bundled_asset()
        if asset is not None:
            data = await run_in_threadpool(asset.read_bytes)
            if data:
                content_type = mimetypes.guess_type(asset.name)[0] or "audio/mpeg"
                logger.info("Using bundled fallback asset %s", asset)
                return AudioAsset(data=data, content_type=content_type, source="fallback")
            logger.warning("Bundled fallback asset %s is empty", asset)

        if not self._url:
            raise FallbackUnavailable(
                "No bundled fallback asset and FALLBACK_URL is not configured"
            )
        return await self._download()

    async def _download(self) -> AudioAsset:
        client = self._client or httpx.AsyncClient()
        try:
            response = await client.get(
                self._url, timeout=self._timeout, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FallbackUnavailable(
                f"Could not download fallback audio from {self._url}: {exc}"
            ) from exc
        finally:
            if self._client is None:
                await client.aclose()

        if not response.content:
            raise FallbackUnavailable(f"Fallback URL {self._url} returned no audio")
        content_type = response.headers.get("content-type", "audio/mpeg").split(";")[0]
        logger.info("Downloaded fallback audio from %s", self._url)
        return AudioAsset(data=response.content, content_type=content_type, source="fallback")


__all__ = ["StaticAssetFallbackProvider"]
