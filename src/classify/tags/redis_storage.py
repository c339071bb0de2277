"""
Redis Tag Storage
Two families of sets:
  classify:content:<id>:tags   tags held by one content id
  classify:tag:<tag>:contents  content ids holding one tag
"""

import logging
from typing import List, Optional

from .storage import TagStorage

logger = logging.getLogger(__name__)

CONTENT_TAGS_KEY = "classify:content:{}:tags"
TAG_PREFIX = "classify:tag:"
TAG_SUFFIX = ":contents"


class RedisTagStorage(TagStorage):
    """Tag index backed by Redis sets"""

    backend = "redis"

    def __init__(self, client, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.client = client

    def _content_tags_key(self, content_id: str) -> str:
        return CONTENT_TAGS_KEY.format(content_id)

    def _tag_contents_key(self, tag: str) -> str:
        return f"{TAG_PREFIX}{tag}{TAG_SUFFIX}"

    def _tag_from_key(self, key: str) -> Optional[str]:
        if key.startswith(TAG_PREFIX) and key.endswith(TAG_SUFFIX):
            return key[len(TAG_PREFIX):-len(TAG_SUFFIX)] or None
        return None

    async def _add_tags(self, content_id: str, tags: List[str]) -> None:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.sadd(self._content_tags_key(content_id), *tags)
            for tag in tags:
                pipe.sadd(self._tag_contents_key(tag), content_id)
            await pipe.execute()
        logger.debug(f"[Redis] Indexed {content_id} under {tags}")

    async def _get_tags(self, content_id: str) -> List[str]:
        return list(await self.client.smembers(self._content_tags_key(content_id)))

    async def _list_tags(self) -> List[str]:
        keys = [key async for key in self.client.scan_iter(match=f"{TAG_PREFIX}*{TAG_SUFFIX}")]
        if not keys:
            return []

        # Liveness comes from membership, not from the key merely existing
        async with self.client.pipeline(transaction=False) as pipe:
            for key in keys:
                pipe.scard(key)
            counts = await pipe.execute()

        tags = set()
        for key, count in zip(keys, counts):
            tag = self._tag_from_key(key)
            if tag and count > 0:
                tags.add(tag)
        return list(tags)

    async def _find_by_tag(self, tag: str) -> List[str]:
        return list(await self.client.smembers(self._tag_contents_key(tag)))

    async def _remove_tags(self, content_id: str, tags: List[str]) -> None:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.srem(self._content_tags_key(content_id), *tags)
            for tag in tags:
                pipe.srem(self._tag_contents_key(tag), content_id)
            await pipe.execute()
        logger.debug(f"[Redis] Retracted {content_id} from {tags}")
