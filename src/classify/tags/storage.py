"""
Tag Storage
Contract for the inverted tag index (tag -> content ids, content id -> tags)
and the factory that selects a backend from configuration
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..backend import guarded_call
from ..config import TagStorageConfig, TagStorageType
from ..errors import ConfigError
from .models import normalize_tags, normalize_tag

logger = logging.getLogger(__name__)


class TagStorage(ABC):
    """
    Inverted index between content ids and tags.

    Tags are normalised on every call. A tag is live while its member set is
    non-empty; there is no separate registry of tags.
    """

    backend = "tags"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def add_tags(self, content_id: str, tags: List[str]) -> None:
        """Set-union the tags into the content's tag set and the content into each tag's member set"""
        tags = normalize_tags(tags)
        if not tags:
            return
        await guarded_call(self._add_tags(str(content_id), tags), self.backend, "add_tags", self.timeout)

    async def get_tags(self, content_id: str) -> List[str]:
        """Current tag set for one content id, sorted; empty if none"""
        tags = await guarded_call(self._get_tags(str(content_id)), self.backend, "get_tags", self.timeout)
        return sorted(tags)

    async def list_tags(self) -> List[str]:
        """Every tag with at least one member, sorted"""
        tags = await guarded_call(self._list_tags(), self.backend, "list_tags", self.timeout)
        return sorted(tags)

    async def find_by_tag(self, tag: str) -> List[str]:
        """Content ids in one tag's member set, sorted"""
        tag = normalize_tag(tag)
        if not tag:
            return []
        ids = await guarded_call(self._find_by_tag(tag), self.backend, "find_by_tag", self.timeout)
        return sorted(ids)

    async def remove_tags(self, content_id: str, tags: List[str]) -> None:
        """Remove the content from each tag's member set and the tags from the content's tag set"""
        tags = normalize_tags(tags)
        if not tags:
            return
        await guarded_call(self._remove_tags(str(content_id), tags), self.backend, "remove_tags", self.timeout)

    async def close(self) -> None:
        """Release backend resources"""

    @abstractmethod
    async def _add_tags(self, content_id: str, tags: List[str]) -> None:
        ...

    @abstractmethod
    async def _get_tags(self, content_id: str) -> List[str]:
        ...

    @abstractmethod
    async def _list_tags(self) -> List[str]:
        ...

    @abstractmethod
    async def _find_by_tag(self, tag: str) -> List[str]:
        ...

    @abstractmethod
    async def _remove_tags(self, content_id: str, tags: List[str]) -> None:
        ...


def create_tag_storage(config: TagStorageConfig, redis_client=None, timeout: Optional[float] = None) -> TagStorage:
    """
    Build the configured tag index.

    Args:
        config: Tag storage configuration
        redis_client: Shared redis.asyncio client
        timeout: Per-operation timeout in seconds

    Returns:
        The index, typed as the TagStorage abstraction
    """
    if config.tag_storage_type == TagStorageType.REDIS:
        from .redis_storage import RedisTagStorage
        if redis_client is None:
            raise ConfigError("Redis tag storage requires a redis client")
        storage = RedisTagStorage(redis_client, timeout=timeout)
    else:
        raise ConfigError(f"Unsupported tag storage type: {config.tag_storage_type}")

    logger.info(f"Tag storage ready: {storage.backend}")
    return storage
