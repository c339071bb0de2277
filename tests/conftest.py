"""
Shared fixtures: in-memory Redis, a temporary filesystem store and a stub classifier.
"""

from typing import List, Optional

import fakeredis
import fakeredis.aioredis
import pytest

from classify.classifier import Classifier
from classify.content.filesystem import FilesystemContentStorage
from classify.tags.redis_storage import RedisTagStorage


class StubClassifier(Classifier):
    """Returns fixed tags and records what it was asked to classify."""

    name = "stub"

    def __init__(self, tags: Optional[List[str]] = None, error: Optional[Exception] = None):
        super().__init__()
        self.tags = tags if tags is not None else ["general"]
        self.error = error
        self.texts: List[str] = []
        self.urls: List[str] = []

    async def _classify(self, content: str) -> List[str]:
        self.texts.append(content)
        if self.error is not None:
            raise self.error
        return list(self.tags)

    async def classify_url(self, url: str) -> List[str]:
        self.urls.append(url)
        return await self.classify(f"page behind {url}")


@pytest.fixture
def redis_client():
    """Fresh fake Redis per test."""
    return fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def content_storage(tmp_path):
    return FilesystemContentStorage(str(tmp_path / "content"))


@pytest.fixture
def tag_storage(redis_client):
    return RedisTagStorage(redis_client)


@pytest.fixture
def stub_classifier():
    return StubClassifier(tags=["Rust", "programming", " rust "])
