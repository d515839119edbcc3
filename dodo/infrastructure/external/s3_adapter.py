"""S3 implementation of the blob store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from dodo.application.interfaces import BlobStore
from dodo.domain.errors import StorageError
from dodo.domain.media import StoredBlob

logger = logging.getLogger(__name__)


class S3BlobStore(BlobStore):
    """Store audio objects in one S3 (or S3-compatible) bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        region: str = "us-east-1",
        public_base_url: str | None = None,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._region = region
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    async def put_blob(self, path: str, data: bytes, content_type: str) -> StoredBlob:
        if not data:
            raise StorageError(f"Refusing to store an empty payload at {path}.")
        if not self._bucket:
            raise StorageError("S3 bucket name is not configured.")

        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {path}: {exc}") from exc

        return StoredBlob(path=path, content_type=content_type, size=len(data))

    async def get_blob(self, path: str) -> bytes:
        try:
            response = await run_in_threadpool(
                self._client.get_object,
                Bucket=self._bucket,
                Key=path,
            )
            return await run_in_threadpool(response["Body"].read)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    async def get_signed_url(self, path: str, ttl_seconds: int) -> Optional[str]:
        try:
            return await run_in_threadpool(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Could not sign URL for %s: %s", path, exc)
            return None

    def get_public_url(self, path: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{path}"
        if self._region == "us-east-1":
            return f"https://{self._bucket}.s3.amazonaws.com/{path}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{path}"


__all__ = ["S3BlobStore"]
