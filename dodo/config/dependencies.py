"""Composition root wiring storage, provider gateways and pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from dodo.application.interfaces import EntityStore, FallbackProvider
from dodo.database import SessionFactory
from dodo.infrastructure.external.s3_adapter import S3BlobStore
from dodo.infrastructure.persistence.repositories_sqlalchemy import build_entity_store
from dodo.pipelines.generation import (
    GenerationScheduler,
    LullabyPipeline,
    VoiceProfilePipeline,
    build_strategy,
)
from dodo.services.aws import create_boto3_client
from dodo.services.elevenlabs import ElevenLabsGateway
from dodo.services.fallback import StaticAssetFallbackProvider
from dodo.services.suno import SunoGateway

from .settings import Settings, settings


@dataclass
class ServiceContainer:
    """Long-lived collaborators shared by every request and background task."""

    http_client: httpx.AsyncClient
    store: EntityStore
    fallback: FallbackProvider
    scheduler: GenerationScheduler
    voice_profiles: VoiceProfilePipeline
    lullabies: LullabyPipeline

    async def aclose(self) -> None:
        await self.http_client.aclose()


def _secret(value) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


def build_container(config: Settings = settings) -> ServiceContainer:
    http_client = httpx.AsyncClient()

    s3_client = create_boto3_client(
        "s3",
        region_name=config.s3.region,
        endpoint_url=config.s3.endpoint_url,
    )
    blobs = S3BlobStore(
        s3_client,
        config.s3.bucket_name,
        region=config.s3.region,
        public_base_url=config.s3.public_base_url,
    )
    store = build_entity_store(SessionFactory, blobs)

    elevenlabs = ElevenLabsGateway(
        http_client,
        api_key=_secret(config.elevenlabs.api_key),
        base_url=config.elevenlabs.base_url,
        model_id=config.elevenlabs.model_id,
        stability=config.elevenlabs.stability,
        similarity_boost=config.elevenlabs.similarity_boost,
        clone_timeout=config.elevenlabs.clone_timeout_seconds,
        request_timeout=config.elevenlabs.request_timeout_seconds,
    )
    suno = SunoGateway(
        http_client,
        api_key=_secret(config.suno.api_key),
        base_url=config.suno.base_url,
        model=config.suno.model,
        callback_url=config.suno.callback_url,
        generate_path=config.suno.generate_path,
        status_paths=config.suno.status_paths,
        cover_paths=config.suno.cover_paths,
        max_duration_minutes=config.suno.max_duration_minutes,
        submit_timeout=config.suno.submit_timeout_seconds,
        status_timeout=config.suno.status_timeout_seconds,
        upload_timeout=config.suno.upload_timeout_seconds,
        download_timeout=config.suno.download_timeout_seconds,
    )
    fallback = StaticAssetFallbackProvider(
        asset_path=config.fallback.asset_path,
        url=config.fallback.url,
        client=http_client,
        timeout=config.fallback.timeout_seconds,
    )

    scheduler = GenerationScheduler(store.jobs, store.lullabies)
    voice_profiles = VoiceProfilePipeline(
        store,
        elevenlabs,
        reuse_voice_id=config.elevenlabs.reuse_voice_id,
        name_prefix=config.elevenlabs.voice_name_prefix,
    )
    lullabies = LullabyPipeline(
        store,
        strategy=build_strategy(config.generation.mode, speech=elevenlabs, music=suno),
        music=suno,
        fallback=fallback,
        scheduler=scheduler,
        poll_interval=config.generation.poll_interval_seconds,
        poll_max_attempts=config.generation.poll_max_attempts,
        poll_max_consecutive_errors=config.generation.poll_max_consecutive_errors,
        poll_rounds=config.generation.poll_rounds,
        max_duration_minutes=config.suno.max_duration_minutes,
        signed_url_ttl=config.s3.signed_url_ttl_seconds,
    )

    return ServiceContainer(
        http_client=http_client,
        store=store,
        fallback=fallback,
        scheduler=scheduler,
        voice_profiles=voice_profiles,
        lullabies=lullabies,
    )


def get_container() -> ServiceContainer:
    """Return the process-wide container, building it on first use."""

    global _CONTAINER
    if _CONTAINER is None:
        _CONTAINER = build_container()
    return _CONTAINER


async def close_container() -> None:
    global _CONTAINER
    if _CONTAINER is not None:
        await _CONTAINER.aclose()
        _CONTAINER = None


_CONTAINER: Optional[ServiceContainer] = None


__all__ = [
    "ServiceContainer",
    "build_container",
    "close_container",
    "get_container",
]
