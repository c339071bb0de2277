"""
Search Service
Tag queries over the index, validated against the content store
"""

import asyncio
import logging
from typing import List

from ..content import Content, ContentStorage
from ..tags import TagStorage, normalize_tags

logger = logging.getLogger(__name__)


class SearchService:
    """Service for tag-based lookups"""

    def __init__(self, content_storage: ContentStorage, tag_storage: TagStorage):
        self.content_storage = content_storage
        self.tag_storage = tag_storage

    async def query_by_tags(self, tags: List[str]) -> List[Content]:
        """
        Get content holding ANY of the given tags, newest update first.

        Ids the index still lists but the content store no longer has are
        skipped; the content store is authoritative for existence.
        """
        tags = normalize_tags(tags)
        if not tags:
            return []

        content_ids = set()
        for tag in tags:
            content_ids.update(await self.tag_storage.find_by_tag(tag))

        ordered_ids = sorted(content_ids)
        results = await asyncio.gather(*(self.content_storage.get(cid) for cid in ordered_ids))

        items = []
        for content_id, content in zip(ordered_ids, results):
            if content is None:
                logger.warning(f"Tag index references missing content {content_id}")
                continue
            items.append(content)

        items.sort(key=lambda c: c.updated_at, reverse=True)
        return items

    async def list_tags(self) -> List[str]:
        """Get every live tag"""
        return await self.tag_storage.list_tags()
