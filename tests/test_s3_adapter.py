"""S3 blob store against botocore's Stubber."""

from __future__ import annotations

import io

import boto3
import pytest
from botocore.config import Config
from botocore.response import StreamingBody
from botocore.stub import Stubber

from dodo.domain.errors import StorageError
from dodo.infrastructure.external.s3_adapter import S3BlobStore


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=Config(signature_version="s3v4"),
    )


@pytest.mark.asyncio
async def test_put_blob_uploads_with_content_type(s3_client):
    store = S3BlobStore(s3_client, "dodo-test")
    stubber = Stubber(s3_client)
    stubber.add_response(
        "put_object",
        {},
        {
            "Bucket": "dodo-test",
            "Key": "voices/abc/source-1",
            "Body": b"sample",
            "ContentType": "audio/m4a",
        },
    )

    with stubber:
        stored = await store.put_blob("voices/abc/source-1", b"sample", "audio/m4a")

    assert stored.path == "voices/abc/source-1"
    assert stored.size == 6
    stubber.assert_no_pending_responses()


@pytest.mark.asyncio
async def test_put_blob_client_error_is_storage_error(s3_client):
    store = S3BlobStore(s3_client, "dodo-test")
    stubber = Stubber(s3_client)
    stubber.add_client_error("put_object", service_error_code="NoSuchBucket", http_status_code=404)

    with stubber, pytest.raises(StorageError):
        await store.put_blob("lullabies/abc", b"audio", "audio/mpeg")


@pytest.mark.asyncio
async def test_put_blob_refuses_empty_payload(s3_client):
    store = S3BlobStore(s3_client, "dodo-test")

    with Stubber(s3_client), pytest.raises(StorageError):
        await store.put_blob("lullabies/abc", b"", "audio/mpeg")


@pytest.mark.asyncio
async def test_get_blob_reads_body(s3_client):
    store = S3BlobStore(s3_client, "dodo-test")
    stubber = Stubber(s3_client)
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(b"audio-bytes"), len(b"audio-bytes"))},
        {"Bucket": "dodo-test", "Key": "lullabies/abc"},
    )

    with stubber:
        data = await store.get_blob("lullabies/abc")

    assert data == b"audio-bytes"


@pytest.mark.asyncio
async def test_signed_url_is_time_limited(s3_client):
    store = S3BlobStore(s3_client, "dodo-test")

    url = await store.get_signed_url("lullabies/abc", 600)

    assert url is not None
    assert "lullabies/abc" in url
    assert "dodo-test" in url
    assert "X-Amz-Expires=600" in url


def test_public_url_variants(s3_client):
    assert (
        S3BlobStore(s3_client, "dodo-test").get_public_url("lullabies/abc")
        == "https://dodo-test.s3.amazonaws.com/lullabies/abc"
    )
    assert (
        S3BlobStore(s3_client, "dodo-test", region="eu-west-3").get_public_url("lullabies/abc")
        == "https://dodo-test.s3.eu-west-3.amazonaws.com/lullabies/abc"
    )
    assert (
        S3BlobStore(
            s3_client, "dodo-test", public_base_url="https://cdn.dodo.test/"
        ).get_public_url("lullabies/abc")
        == "https://cdn.dodo.test/lullabies/abc"
    )
