"""
Tests for the filesystem content store.
"""

import uuid

import pytest

from classify.config import StorageConfig
from classify.content import Content, create_content_storage
from classify.content.filesystem import FilesystemContentStorage
from classify.errors import SerializationError


@pytest.mark.asyncio
class TestFilesystemContentStorage:
    async def test_store_and_get(self, content_storage):
        content = Content.new("Filesystem storage test content").with_tags(["test", "fs"])
        await content_storage.store(content)

        loaded = await content_storage.get(str(content.id))
        assert loaded == content

    async def test_record_file_layout(self, content_storage):
        content = Content.new("Layout")
        await content_storage.store(content)

        path = content_storage.base_dir / f"{content.id}.json"
        assert path.exists()
        assert Content.model_validate_json(path.read_text()) == content
        # No temp files left behind
        assert [p.name for p in content_storage.base_dir.iterdir()] == [path.name]

    async def test_get_missing_returns_none(self, content_storage):
        assert await content_storage.get(str(uuid.uuid4())) is None

    async def test_get_invalid_id_returns_none(self, content_storage):
        assert await content_storage.get("../../etc/passwd") is None
        assert await content_storage.delete("not-a-uuid") is False

    async def test_store_overwrites(self, content_storage):
        content = Content.new("Overwrite me")
        await content_storage.store(content)
        await content_storage.store(content.with_tags(["new"]))

        loaded = await content_storage.get(str(content.id))
        assert loaded.tags == ["new"]
        assert len(await content_storage.list()) == 1

    async def test_list_ignores_foreign_files(self, content_storage):
        content = Content.new("Listed")
        await content_storage.store(content)
        (content_storage.base_dir / "notes.json").write_text("{}")
        (content_storage.base_dir / "readme.txt").write_text("hello")

        listed = await content_storage.list()
        assert [c.id for c in listed] == [content.id]

    async def test_find_by_hash(self, content_storage):
        first = Content.new("first")
        second = Content.new("second")
        await content_storage.store(first)
        await content_storage.store(second)

        found = await content_storage.find_by_hash(Content.generate_hash("second"))
        assert found.id == second.id
        assert await content_storage.find_by_hash(Content.generate_hash("third")) is None

    async def test_delete_is_idempotent(self, content_storage):
        content = Content.new("Delete me")
        await content_storage.store(content)

        assert await content_storage.delete(str(content.id)) is True
        assert await content_storage.get(str(content.id)) is None
        assert await content_storage.delete(str(content.id)) is False

    async def test_corrupt_record_raises(self, content_storage):
        content_id = str(uuid.uuid4())
        (content_storage.base_dir / f"{content_id}.json").write_text("{not json")

        with pytest.raises(SerializationError):
            await content_storage.get(content_id)
        with pytest.raises(SerializationError):
            await content_storage.list()

    async def test_factory_builds_filesystem_store(self, tmp_path):
        config = StorageConfig(storage_type="filesystem", content_storage_path=str(tmp_path / "store"))
        storage = await create_content_storage(config)

        assert isinstance(storage, FilesystemContentStorage)
        assert (tmp_path / "store").is_dir()
