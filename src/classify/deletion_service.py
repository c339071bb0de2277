"""
Deletion Service
Removes a content record, retracts its tag associations and reports which tags
were left without members
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .content import ContentStorage
from .content.storage import canonical_id
from .errors import SerializationError
from .tags import TagStorage, normalize_tags

logger = logging.getLogger(__name__)


@dataclass
class DeletionOutcome:
    content_id: str
    deleted: bool
    removed_tags: List[str] = field(default_factory=list)


class DeletionService:
    """
    Order of operations:
      1. read the record (absent -> not found)
      2. read its tag set from the index, unioned with the tags embedded in the record
      3. delete the record; losing a concurrent delete counts as not found
      4. retract every tag association
      5. re-query each tag; a tag with no remaining members is orphaned

    Orphans are computed after retraction, so the deleted id never keeps a tag alive.

    A record that exists but cannot be decoded is still deleted. Its embedded
    tags are unreadable, so only the tags the index holds for it are retracted.
    """

    def __init__(self, content_storage: ContentStorage, tag_storage: TagStorage):
        self.content_storage = content_storage
        self.tag_storage = tag_storage

    async def delete(self, content_id: str) -> DeletionOutcome:
        requested_id = content_id
        content_id = canonical_id(content_id)
        if content_id is None:
            return DeletionOutcome(content_id=requested_id, deleted=False)

        try:
            existing = await self.content_storage.get(content_id)
        except SerializationError as e:
            logger.warning(f"Deleting unreadable content {content_id}: {e}")
            embedded_tags = []
        else:
            if existing is None:
                return DeletionOutcome(content_id=content_id, deleted=False)
            embedded_tags = existing.tags

        indexed_tags = await self.tag_storage.get_tags(content_id)
        # Embedded tags cover records whose indexing never completed
        tags = normalize_tags([*indexed_tags, *embedded_tags])

        if not await self.content_storage.delete(content_id):
            logger.info(f"Content {content_id} was deleted concurrently")
            return DeletionOutcome(content_id=content_id, deleted=False)

        await self.tag_storage.remove_tags(content_id, tags)

        orphaned = []
        for tag in tags:
            if not await self.tag_storage.find_by_tag(tag):
                orphaned.append(tag)

        logger.info(f"Deleted content {content_id}; orphaned tags: {orphaned}")
        return DeletionOutcome(content_id=content_id, deleted=True, removed_tags=sorted(orphaned))
