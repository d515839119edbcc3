"""HTTP surface exercised through the ASGI app with fake providers."""

from __future__ import annotations

import uuid

import httpx
import pytest
import pytest_asyncio

from dodo.controllers.dependencies import (
    get_entity_store,
    get_lullaby_pipeline,
    get_voice_profile_pipeline,
)
from dodo.domain.models import VoiceProfileStatus
from dodo.main import app
from dodo.pipelines.generation import GenerationFlow

from conftest import (
    FakeCloning,
    FakeMusic,
    make_lullaby_pipeline,
    make_voice_pipeline,
    seed_child_and_profile,
    seed_lullaby,
)


@pytest_asyncio.fixture
async def api(store):
    lullaby_pipeline = make_lullaby_pipeline(store, music=FakeMusic())
    app.dependency_overrides[get_entity_store] = lambda: store
    app.dependency_overrides[get_voice_profile_pipeline] = lambda: make_voice_pipeline(
        store, FakeCloning(voice_id="voice-lea")
    )
    app.dependency_overrides[get_lullaby_pipeline] = lambda: lullaby_pipeline

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://dodo.test") as client:
        client.lullaby_pipeline = lullaby_pipeline
        yield client
    await lullaby_pipeline._scheduler.drain()
    app.dependency_overrides.clear()


def _audio(name: str, content: bytes = b"recording", content_type: str = "audio/m4a"):
    return ("audioFiles", (name, content, content_type))


async def _create_child(api, name: str = "Léa") -> dict:
    response = await api.post("/children", json={"name": name, "ageMonths": 18})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_full_onboarding_and_generation_flow(api, blobs):
    profile_response = await api.post(
        "/voice/profile",
        files=[_audio("one.m4a"), _audio("two.m4a")],
    )
    assert profile_response.status_code == 200
    profile = profile_response.json()
    assert profile["status"] == "ready"
    assert profile["externalVoiceId"] == "voice-lea"

    child = await _create_child(api)

    created = await api.post(
        "/lullabies",
        json={
            "childId": child["id"],
            "voiceProfileId": profile["id"],
            "style": "soft",
            "durationMinutes": 5,
            "languageCode": "fr",
        },
    )
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "generating"
    assert body["audioUrl"] is None
    assert body["title"] == "Lullaby for Léa"

    await api.lullaby_pipeline._scheduler.drain()

    fetched = await api.get(f"/lullabies/{body['id']}")
    assert fetched.status_code == 200
    finished = fetched.json()
    assert finished["status"] == "ready"
    assert finished["audioUrl"].startswith("https://signed.dodo.test/lullabies/")
    assert f"lullabies/{body['id']}" in blobs.objects

    listing = await api.get("/lullabies")
    assert [item["id"] for item in listing.json()] == [body["id"]]


@pytest.mark.asyncio
@pytest.mark.parametrize("duration", [0, -1])
async def test_non_positive_duration_is_rejected_without_record(api, store, duration):
    child = await _create_child(api)
    profile = await store.voice_profiles.insert(
        status=VoiceProfileStatus.READY, external_voice_id="v"
    )

    response = await api.post(
        "/lullabies",
        json={
            "childId": child["id"],
            "voiceProfileId": str(profile.id),
            "style": "soft",
            "durationMinutes": duration,
            "languageCode": "fr",
        },
    )

    assert response.status_code == 400
    assert await store.lullabies.list() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("duration", [True, "5"])
async def test_non_numeric_duration_is_rejected_without_record(api, store, duration):
    child, profile = await seed_child_and_profile(store)

    response = await api.post(
        "/lullabies",
        json={
            "childId": str(child.id),
            "voiceProfileId": str(profile.id),
            "style": "soft",
            "durationMinutes": duration,
            "languageCode": "fr",
        },
    )

    assert response.status_code == 400
    assert await store.lullabies.list() == []


@pytest.mark.asyncio
async def test_unknown_child_is_rejected(api, store):
    profile = await store.voice_profiles.insert(
        status=VoiceProfileStatus.READY, external_voice_id="v"
    )

    response = await api.post(
        "/lullabies",
        json={
            "childId": str(uuid.uuid4()),
            "voiceProfileId": str(profile.id),
            "style": "joyful",
            "durationMinutes": 3,
            "languageCode": "en",
        },
    )

    assert response.status_code == 400
    assert "childId" in response.json()["detail"]


@pytest.mark.asyncio
async def test_voice_profile_requires_files(api):
    response = await api.post("/voice/profile", data={})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_voice_profile_rejects_too_many_files(api, store):
    files = [_audio(f"sample-{index}.m4a") for index in range(4)]

    response = await api.post("/voice/profile", files=files)

    assert response.status_code == 400
    assert await store.voice_profiles.list() == []


@pytest.mark.asyncio
async def test_voice_profile_rejects_non_audio(api):
    response = await api.post(
        "/voice/profile",
        files=[("audioFiles", ("notes.txt", b"hello", "text/plain"))],
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_ids_are_not_found(api):
    missing = uuid.uuid4()

    assert (await api.get(f"/lullabies/{missing}")).status_code == 404
    assert (await api.get(f"/voice/profile/{missing}")).status_code == 404


@pytest.mark.asyncio
async def test_blank_child_name_is_rejected(api):
    response = await api.post("/children", json={"name": "   ", "ageMonths": 4})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_children_are_listed_oldest_first(api):
    first = await _create_child(api, "Léa")
    second = await _create_child(api, "Noé")

    response = await api.get("/children")

    assert [item["id"] for item in response.json()] == [first["id"], second["id"]]


@pytest.mark.asyncio
async def test_health_and_metrics(api):
    health = await api.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert "x-request-id" in health.headers

    metrics = await api.get("/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text


def test_generation_flow_lists_every_stage_in_order():
    stages = list(GenerationFlow.stages())

    assert [stage.order for stage in stages] == list(range(1, len(stages) + 1))
    assert "Fallback" in GenerationFlow.describe()


@pytest.mark.asyncio
async def test_reading_a_lullaby_never_changes_it(api, store):
    child, profile = await seed_child_and_profile(store)
    lullaby = await seed_lullaby(store, child, profile)

    async def read_three_times():
        before = await store.lullabies.get_by_id(lullaby.id)
        bodies = [(await api.get(f"/lullabies/{lullaby.id}")).json() for _ in range(3)]
        after = await store.lullabies.get_by_id(lullaby.id)
        assert bodies[0] == bodies[1] == bodies[2]
        assert after.model_dump() == before.model_dump()
        return bodies[0]

    generating = await read_three_times()
    assert generating["status"] == "generating"
    assert generating["audioUrl"] is None

    await api.lullaby_pipeline.run(lullaby.id)

    ready = await read_three_times()
    assert ready["status"] == "ready"
    assert ready["audioUrl"]
