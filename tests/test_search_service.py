"""
Tests for tag queries.
"""

from datetime import datetime, timedelta, timezone

import pytest

from classify.content import Content
from classify.search import SearchService


@pytest.fixture
def service(content_storage, tag_storage):
    return SearchService(content_storage, tag_storage)


async def store_at(content_storage, tag_storage, text, tags, updated_at):
    content = Content.new(text).model_copy(update={"tags": tags, "updated_at": updated_at})
    await content_storage.store(content)
    await tag_storage.add_tags(str(content.id), tags)
    return content


@pytest.mark.asyncio
class TestQueryByTags:
    async def test_union_sorted_newest_first(self, service, content_storage, tag_storage):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        old = await store_at(content_storage, tag_storage, "old", ["rust"], base)
        mid = await store_at(content_storage, tag_storage, "mid", ["web"], base + timedelta(hours=1))
        new = await store_at(content_storage, tag_storage, "new", ["rust", "web"], base + timedelta(hours=2))
        await store_at(content_storage, tag_storage, "other", ["ai"], base + timedelta(hours=3))

        items = await service.query_by_tags(["Rust", "web"])

        assert [c.id for c in items] == [new.id, mid.id, old.id]

    async def test_unknown_tag_is_empty(self, service):
        assert await service.query_by_tags(["nothing"]) == []
        assert await service.query_by_tags([" "]) == []

    async def test_stale_index_entries_skipped(self, service, content_storage, tag_storage, caplog):
        content = await store_at(
            content_storage, tag_storage, "gone", ["stale"], datetime.now(timezone.utc)
        )
        await content_storage.delete(str(content.id))

        assert await service.query_by_tags(["stale"]) == []
        assert "missing content" in caplog.text

    async def test_list_tags(self, service, content_storage, tag_storage):
        await store_at(content_storage, tag_storage, "a", ["zeta", "alpha"], datetime.now(timezone.utc))
        assert await service.list_tags() == ["alpha", "zeta"]
