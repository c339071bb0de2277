"""
Tests for tag index reconciliation.
"""

import pytest

from classify.content import Content
from classify.deletion_service import DeletionService
from classify.errors import StorageError
from classify.reconcile_service import IndexReconciler
from classify.tags.redis_storage import RedisTagStorage


class FlakyRemoveTagStorage(RedisTagStorage):
    """Fails retraction until told otherwise."""

    fail_removes = True

    async def _remove_tags(self, content_id, tags):
        if self.fail_removes:
            raise ConnectionError("redis went away")
        await super()._remove_tags(content_id, tags)


@pytest.fixture
def reconciler(content_storage, tag_storage):
    return IndexReconciler(content_storage, tag_storage)


@pytest.mark.asyncio
class TestReconcile:
    async def test_repairs_unindexed_records(self, reconciler, content_storage, tag_storage):
        indexed = Content.new("indexed").with_tags(["a"])
        await content_storage.store(indexed)
        await tag_storage.add_tags(str(indexed.id), ["a"])

        unindexed = Content.new("unindexed").with_tags(["b", "c"])
        await content_storage.store(unindexed)

        report = await reconciler.reconcile()

        assert report.scanned == 2
        assert report.repaired == 1
        assert report.repaired_ids == [str(unindexed.id)]
        assert await tag_storage.get_tags(str(unindexed.id)) == ["b", "c"]
        assert await tag_storage.find_by_tag("b") == [str(unindexed.id)]

    async def test_partially_indexed_record_is_completed(self, reconciler, content_storage, tag_storage):
        content = Content.new("partial").with_tags(["a", "b"])
        await content_storage.store(content)
        await tag_storage.add_tags(str(content.id), ["a"])

        report = await reconciler.reconcile()

        assert report.repaired == 1
        assert await tag_storage.get_tags(str(content.id)) == ["a", "b"]

    async def test_second_run_is_a_no_op(self, reconciler, content_storage):
        await content_storage.store(Content.new("x").with_tags(["t"]))

        assert (await reconciler.reconcile()).repaired == 1
        second = await reconciler.reconcile()
        assert second.scanned == 1
        assert second.repaired == 0
        assert second.repaired_ids == []
        assert second.pruned == 0

    async def test_untagged_records_need_nothing(self, reconciler, content_storage):
        await content_storage.store(Content.new("untagged"))

        report = await reconciler.reconcile()
        assert report.scanned == 1
        assert report.repaired == 0

    async def test_prunes_members_left_by_failed_retraction(self, content_storage, redis_client):
        tag_storage = FlakyRemoveTagStorage(redis_client)
        deletion = DeletionService(content_storage, tag_storage)
        reconciler = IndexReconciler(content_storage, tag_storage)

        gone = Content.new("deleted").with_tags(["solo", "common"])
        kept = Content.new("kept").with_tags(["common"])
        for content in (gone, kept):
            await content_storage.store(content)
            await tag_storage.add_tags(str(content.id), content.tags)

        with pytest.raises(StorageError):
            await deletion.delete(str(gone.id))
        assert not (await deletion.delete(str(gone.id))).deleted
        assert await tag_storage.list_tags() == ["common", "solo"]

        tag_storage.fail_removes = False
        report = await reconciler.reconcile()

        assert report.repaired == 0
        assert report.pruned == 2
        assert sorted(report.pruned_entries) == [(str(gone.id), "common"), (str(gone.id), "solo")]
        assert await tag_storage.list_tags() == ["common"]
        assert await tag_storage.find_by_tag("common") == [str(kept.id)]
        assert await tag_storage.get_tags(str(gone.id)) == []

        again = await reconciler.reconcile()
        assert again.pruned == 0
