"""
Content Storage
Contract shared by the filesystem, S3 and Redis content stores, plus the factory
that selects one from configuration
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from pydantic import ValidationError

from ..backend import guarded_call
from ..config import StorageConfig, StorageType
from ..errors import ConfigError, SerializationError
from .models import Content

logger = logging.getLogger(__name__)


def canonical_id(content_id) -> Optional[str]:
    """Lower-case hyphenated UUID string, or None if content_id is not a UUID"""
    try:
        return str(uuid.UUID(str(content_id)))
    except ValueError:
        return None


def decode_content(raw: Union[str, bytes], source: str) -> Content:
    """Deserialize a stored record; a corrupt record is an error, never 'not found'"""
    try:
        return Content.model_validate_json(raw)
    except ValidationError as e:
        raise SerializationError(f"Malformed content record at {source}: {e}") from e


class ContentStorage(ABC):
    """
    Content-addressable store of Content records.

    Records are keyed by id and indexed by content_hash. Public methods run the
    backend implementation through guarded_call so every backend surfaces the
    same error contract.
    """

    backend = "content"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def store(self, content: Content) -> None:
        """Persist the record under its id and update the hash index"""
        await guarded_call(self._store(content), self.backend, "store", self.timeout)

    async def get(self, content_id: str) -> Optional[Content]:
        """Return the record, or None if no record has this id"""
        content_id = canonical_id(content_id)
        if content_id is None:
            return None
        return await guarded_call(self._get(content_id), self.backend, "get", self.timeout)

    async def list(self) -> List[Content]:
        """Return every record, in no particular order"""
        return await guarded_call(self._list(), self.backend, "list", self.timeout)

    async def delete(self, content_id: str) -> bool:
        """Remove the record and its hash index entry; False if nothing was there"""
        content_id = canonical_id(content_id)
        if content_id is None:
            return False
        return await guarded_call(self._delete(content_id), self.backend, "delete", self.timeout)

    async def find_by_hash(self, content_hash: str) -> Optional[Content]:
        """Return the record whose content_hash matches, or None"""
        return await guarded_call(
            self._find_by_hash(content_hash), self.backend, "find_by_hash", self.timeout
        )

    async def close(self) -> None:
        """Release backend resources"""

    @abstractmethod
    async def _store(self, content: Content) -> None:
        ...

    @abstractmethod
    async def _get(self, content_id: str) -> Optional[Content]:
        ...

    @abstractmethod
    async def _list(self) -> List[Content]:
        ...

    @abstractmethod
    async def _delete(self, content_id: str) -> bool:
        ...

    async def _find_by_hash(self, content_hash: str) -> Optional[Content]:
        # Backends without a secondary index scan every record
        for content in await self._list():
            if content.content_hash == content_hash:
                return content
        return None


async def create_content_storage(config: StorageConfig, redis_client=None) -> ContentStorage:
    """
    Build the configured content store.

    Args:
        config: Storage configuration
        redis_client: Shared redis.asyncio client, required for the Redis backend

    Returns:
        The store, typed as the ContentStorage abstraction
    """
    if config.storage_type == StorageType.FILESYSTEM:
        from .filesystem import FilesystemContentStorage
        storage = FilesystemContentStorage(config.content_storage_path, timeout=config.timeout_seconds)
    elif config.storage_type == StorageType.S3:
        from .s3 import S3ContentStorage
        storage = await S3ContentStorage.connect(config)
    else:
        from .redis_store import RedisContentStorage
        if redis_client is None:
            raise ConfigError("Redis content storage requires a redis client")
        storage = RedisContentStorage(redis_client, prefix=config.redis_prefix, timeout=config.timeout_seconds)

    logger.info(f"Content storage ready: {storage.backend}")
    return storage
