"""
Tests for the S3 content store against a moto-mocked bucket.
"""

import uuid

import boto3
import pytest
from moto import mock_aws

from classify.config import StorageConfig
from classify.content import Content, create_content_storage
from classify.content.s3 import S3ContentStorage, normalize_prefix
from classify.errors import SerializationError, StorageError

BUCKET = "classify-test"


@pytest.fixture
def aws(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def s3_config():
    return StorageConfig(
        storage_type="s3",
        s3_bucket=BUCKET,
        s3_prefix="content",
        s3_region="us-east-1",
        s3_endpoint_url=None,
        s3_profile=None,
        s3_access_key="testing",
        s3_secret_key="testing",
    )


def test_normalize_prefix():
    assert normalize_prefix("") == ""
    assert normalize_prefix(None) == ""
    assert normalize_prefix("content") == "content/"
    assert normalize_prefix("content/") == "content/"


@pytest.mark.asyncio
class TestS3ContentStorage:
    async def test_round_trip(self, aws, s3_config):
        storage = await create_content_storage(s3_config)
        assert isinstance(storage, S3ContentStorage)

        content = Content.new("S3 storage test content").with_tags(["test", "s3"])
        await storage.store(content)

        assert await storage.get(str(content.id)) == content
        listed = await storage.list()
        assert [c.id for c in listed] == [content.id]
        found = await storage.find_by_hash(Content.generate_hash("S3 storage test content"))
        assert found.id == content.id

        assert await storage.delete(str(content.id)) is True
        assert await storage.get(str(content.id)) is None
        assert await storage.delete(str(content.id)) is False

    async def test_object_key_uses_prefix(self, aws, s3_config):
        storage = await S3ContentStorage.connect(s3_config)
        content = Content.new("Keyed")
        await storage.store(content)

        keys = [obj["Key"] for obj in aws.list_objects_v2(Bucket=BUCKET)["Contents"]]
        assert keys == [f"content/{content.id}.json"]

    async def test_list_skips_foreign_objects(self, aws, s3_config):
        storage = await S3ContentStorage.connect(s3_config)
        content = Content.new("Real record")
        await storage.store(content)
        aws.put_object(Bucket=BUCKET, Key="content/readme.txt", Body=b"hello")
        aws.put_object(Bucket=BUCKET, Key=f"content/nested/{uuid.uuid4()}.json", Body=b"{}")
        aws.put_object(Bucket=BUCKET, Key="other/stray.json", Body=b"{}")

        listed = await storage.list()
        assert [c.id for c in listed] == [content.id]

    async def test_missing_and_invalid_ids(self, aws, s3_config):
        storage = await S3ContentStorage.connect(s3_config)
        assert await storage.get(str(uuid.uuid4())) is None
        assert await storage.get("not-a-uuid") is None

    async def test_corrupt_record_raises(self, aws, s3_config):
        storage = await S3ContentStorage.connect(s3_config)
        content_id = str(uuid.uuid4())
        aws.put_object(Bucket=BUCKET, Key=f"content/{content_id}.json", Body=b"{broken")

        with pytest.raises(SerializationError):
            await storage.get(content_id)

    async def test_missing_bucket_fails_at_connect(self, aws, s3_config):
        s3_config.s3_bucket = "does-not-exist"
        with pytest.raises(StorageError, match="does-not-exist"):
            await S3ContentStorage.connect(s3_config)
