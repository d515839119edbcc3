"""Voice cloning and speech synthesis gateway."""

from __future__ import annotations

import json
import mimetypes

import httpx
import pytest

from dodo.domain.errors import InvalidRequest, ProviderRejected, ProviderUnavailable
from dodo.services.elevenlabs import ElevenLabsGateway, sample_part

BASE = "https://elevenlabs.test/v1"


def make_gateway(handler, api_key="xi-key"):
    seen: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return ElevenLabsGateway(client, api_key=api_key, base_url=BASE), seen


@pytest.fixture
def samples(tmp_path):
    paths = []
    for index in (1, 2):
        path = tmp_path / f"sample-{index}.m4a"
        path.write_bytes(f"sample-{index}".encode())
        paths.append(path)
    return paths


@pytest.mark.asyncio
async def test_clone_voice_uploads_every_sample(samples):
    gateway, seen = make_gateway(lambda request: httpx.Response(200, json={"voice_id": "v-42"}))

    voice_id = await gateway.clone_voice(samples, "DODO Voice test")

    assert voice_id == "v-42"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE}/voices/add"
    assert request.headers["xi-api-key"] == "xi-key"
    assert request.content.count(b'name="files"') == 2
    assert b"DODO Voice test" in request.content
    assert b"sample-1" in request.content and b"sample-2" in request.content


@pytest.mark.asyncio
async def test_clone_voice_downloads_url_samples_first():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "storage.test":
            return httpx.Response(200, content=b"remote-sample")
        return httpx.Response(200, json={"voice_id": "v-remote"})

    gateway, seen = make_gateway(handler)

    voice_id = await gateway.clone_voice(["https://storage.test/voices/1/source-1"], "remote")

    assert voice_id == "v-remote"
    assert [request.url.host for request in seen] == ["storage.test", "elevenlabs.test"]
    assert b"remote-sample" in seen[1].content


@pytest.mark.asyncio
async def test_clone_voice_requires_existing_samples(tmp_path):
    gateway, seen = make_gateway(lambda request: httpx.Response(200, json={"voice_id": "x"}))

    with pytest.raises(InvalidRequest):
        await gateway.clone_voice([tmp_path / "missing.m4a"], "name")
    with pytest.raises(InvalidRequest):
        await gateway.clone_voice([], "name")
    assert seen == []


@pytest.mark.asyncio
async def test_clone_voice_structured_error_is_rejected(samples):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"detail": {"status": "voice_limit_reached", "message": "Voice limit reached"}},
        )

    gateway, _ = make_gateway(handler)

    with pytest.raises(ProviderRejected) as excinfo:
        await gateway.clone_voice(samples, "name")

    assert excinfo.value.raw_message == "Voice limit reached"
    assert excinfo.value.provider == "elevenlabs"
    assert "[HTTP 400]" in str(excinfo.value)


@pytest.mark.asyncio
async def test_clone_voice_network_failure_is_unavailable(samples):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure", request=request)

    gateway, _ = make_gateway(handler)

    with pytest.raises(ProviderUnavailable):
        await gateway.clone_voice(samples, "name")


@pytest.mark.asyncio
async def test_clone_voice_without_voice_id_is_rejected(samples):
    gateway, _ = make_gateway(lambda request: httpx.Response(200, json={"status": "ok"}))

    with pytest.raises(ProviderRejected):
        await gateway.clone_voice(samples, "name")


@pytest.mark.asyncio
async def test_synthesize_posts_text_with_voice_settings():
    gateway, seen = make_gateway(lambda request: httpx.Response(200, content=b"mp3-bytes"))

    audio = await gateway.synthesize("v-42", "Une comptine douce")

    assert audio == b"mp3-bytes"
    assert seen[0].url.path == "/v1/text-to-speech/v-42"
    body = json.loads(seen[0].content)
    assert body["model_id"] == "eleven_multilingual_v2"
    assert body["voice_settings"] == {"stability": 0.5, "similarity_boost": 0.75}


@pytest.mark.asyncio
async def test_missing_api_key_is_rejected(samples):
    gateway, seen = make_gateway(lambda request: httpx.Response(200), api_key=None)

    with pytest.raises(ProviderRejected):
        await gateway.clone_voice(samples, "name")
    assert seen == []


@pytest.mark.asyncio
async def test_clone_voice_keeps_each_sample_name_and_type(tmp_path):
    wav = tmp_path / "source-1.wav"
    wav.write_bytes(b"wav-sample")
    mp3 = tmp_path / "source-2.mp3"
    mp3.write_bytes(b"mp3-sample")
    gateway, seen = make_gateway(lambda request: httpx.Response(200, json={"voice_id": "v-1"}))

    await gateway.clone_voice([wav, mp3], "typed")

    body = seen[0].content
    assert b'filename="source-1.wav"' in body
    assert b'filename="source-2.mp3"' in body
    assert f"Content-Type: {mimetypes.guess_type('source-1.wav')[0]}".encode() in body
    assert f"Content-Type: {mimetypes.guess_type('source-2.mp3')[0]}".encode() in body


def test_sample_part_names_url_samples_after_their_path():
    assert sample_part("https://storage.test/voices/1/source-1", 1, b"x") == (
        "source-1",
        b"x",
        "audio/m4a",
    )
    filename, _, content_type = sample_part("https://storage.test/a/take.wav?sig=1", 2, b"x")
    assert filename == "take.wav"
    assert content_type == mimetypes.guess_type("take.wav")[0]
