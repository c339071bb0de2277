"""
Redis Content Storage
Records are JSON strings at "<prefix>:<id>"; a hash at "<prefix>hash_index" maps
content_hash -> id. With the default prefix "classify:content:" that gives
"classify:content::<id>" and "classify:content:hash_index", the key layout of
existing deployments.
"""

import logging
from typing import List, Optional

from redis.exceptions import WatchError

from ..errors import SerializationError, StorageError
from .models import Content
from .storage import ContentStorage, decode_content

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "classify:content:"
MGET_BATCH_SIZE = 100
DELETE_RETRIES = 5


class RedisContentStorage(ContentStorage):
    """Content store backed by Redis strings plus a hash-field secondary index"""

    backend = "redis"

    def __init__(self, client, prefix: str = DEFAULT_PREFIX, timeout: Optional[float] = None):
        super().__init__(timeout=timeout)
        self.client = client
        self.prefix = prefix

    def _content_key(self, content_id: str) -> str:
        return f"{self.prefix}:{content_id}"

    def _hash_index_key(self) -> str:
        return f"{self.prefix}hash_index"

    async def _store(self, content: Content) -> None:
        content_key = self._content_key(str(content.id))

        # Value and hash index entry land in one MULTI/EXEC
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(content_key, content.to_json())
            if content.content_hash:
                pipe.hset(self._hash_index_key(), content.content_hash, str(content.id))
            await pipe.execute()

        logger.debug(f"[Redis] Stored content {content.id} at {content_key}")

    async def _get(self, content_id: str) -> Optional[Content]:
        content_key = self._content_key(content_id)
        raw = await self.client.get(content_key)
        if raw is None:
            return None
        return decode_content(raw, content_key)

    async def _list(self) -> List[Content]:
        keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}:*")]
        contents = []
        for start in range(0, len(keys), MGET_BATCH_SIZE):
            batch = keys[start:start + MGET_BATCH_SIZE]
            values = await self.client.mget(batch)
            for key, raw in zip(batch, values):
                # Deleted between SCAN and MGET
                if raw is None:
                    continue
                contents.append(decode_content(raw, key))
        return contents

    async def _delete(self, content_id: str) -> bool:
        content_key = self._content_key(content_id)
        index_key = self._hash_index_key()

        for _ in range(DELETE_RETRIES):
            try:
                async with self.client.pipeline(transaction=True) as pipe:
                    await pipe.watch(content_key, index_key)
                    raw = await pipe.get(content_key)
                    if raw is None:
                        return False

                    try:
                        content = decode_content(raw, content_key)
                    except SerializationError:
                        # Its stale hash entry resolves to no record in find_by_hash
                        logger.warning(f"[Redis] Deleting unreadable content at {content_key}")
                        content = None

                    drop_index = False
                    if content is not None and content.content_hash:
                        # Only drop the index entry if it still points at this record
                        indexed_id = await pipe.hget(index_key, content.content_hash)
                        drop_index = indexed_id == content_id

                    pipe.multi()
                    if drop_index:
                        pipe.hdel(index_key, content.content_hash)
                    pipe.delete(content_key)
                    results = await pipe.execute()
            except WatchError:
                logger.debug(f"[Redis] Concurrent write while deleting {content_id}, retrying")
                continue

            removed = bool(results[-1])
            if removed:
                logger.debug(f"[Redis] Deleted content {content_id}")
            return removed

        raise StorageError(
            f"Gave up deleting {content_id} after {DELETE_RETRIES} concurrent modifications",
            self.backend,
            "delete",
        )

    async def _find_by_hash(self, content_hash: str) -> Optional[Content]:
        content_id = await self.client.hget(self._hash_index_key(), content_hash)
        if content_id is None:
            return None
        return await self._get(content_id)
