"""
Tests for the classification orchestrator.
"""

import pytest

from classify.classification_service import ClassificationService, ClassificationStatus
from classify.content import Content
from classify.errors import ClassificationError, InvalidContentError, StorageError
from classify.tags.redis_storage import RedisTagStorage

from conftest import StubClassifier


class FailingTagStorage(RedisTagStorage):
    async def _add_tags(self, content_id, tags):
        raise ConnectionError("redis went away")


class FailingContentStorage:
    """Wraps a real store but refuses writes."""

    def __init__(self, inner):
        self.inner = inner

    async def find_by_hash(self, content_hash):
        return await self.inner.find_by_hash(content_hash)

    async def store(self, content):
        raise StorageError("disk full", "filesystem", "store")


@pytest.fixture
def service(content_storage, tag_storage, stub_classifier):
    return ClassificationService(content_storage, tag_storage, stub_classifier)


@pytest.mark.asyncio
class TestClassify:
    async def test_new_content_is_stored_and_indexed(self, service, content_storage, tag_storage):
        outcome = await service.classify("Rust is a systems programming language")

        assert outcome.status == ClassificationStatus.CREATED
        assert not outcome.is_duplicate
        content = outcome.content
        assert content.tags == ["rust", "programming"]
        assert content.content_hash == Content.generate_hash("Rust is a systems programming language")

        assert await content_storage.get(str(content.id)) == content
        assert await tag_storage.get_tags(str(content.id)) == ["programming", "rust"]
        assert await tag_storage.find_by_tag("rust") == [str(content.id)]

    async def test_duplicate_returns_existing_without_classifying(self, service, stub_classifier, content_storage):
        first = await service.classify("Same text")
        second = await service.classify("Same text")

        assert second.status == ClassificationStatus.DUPLICATE
        assert second.content.id == first.content.id
        assert len(stub_classifier.texts) == 1
        assert len(await content_storage.list()) == 1

    async def test_url_goes_through_url_classification(self, service, stub_classifier):
        outcome = await service.classify("https://example.com/article")

        assert stub_classifier.urls == ["https://example.com/article"]
        assert outcome.content.content == "https://example.com/article"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_content_rejected(self, service, stub_classifier, text):
        with pytest.raises(InvalidContentError):
            await service.classify(text)
        assert stub_classifier.texts == []

    async def test_classifier_failure_touches_nothing(self, content_storage, tag_storage, redis_client):
        classifier = StubClassifier(error=RuntimeError("model unavailable"))
        service = ClassificationService(content_storage, tag_storage, classifier)

        with pytest.raises(ClassificationError):
            await service.classify("Some content")

        assert await content_storage.list() == []
        assert await redis_client.keys("*") == []

    async def test_store_failure_skips_indexing(self, content_storage, tag_storage, stub_classifier, redis_client):
        service = ClassificationService(FailingContentStorage(content_storage), tag_storage, stub_classifier)

        with pytest.raises(StorageError):
            await service.classify("Some content")

        assert await redis_client.keys("*") == []

    async def test_index_failure_leaves_record_persisted(self, content_storage, redis_client, stub_classifier, caplog):
        service = ClassificationService(content_storage, FailingTagStorage(redis_client), stub_classifier)

        with pytest.raises(StorageError):
            await service.classify("Persisted but not indexed")

        stored = await content_storage.list()
        assert len(stored) == 1
        assert stored[0].tags == ["rust", "programming"]
        assert "not indexed" in caplog.text
