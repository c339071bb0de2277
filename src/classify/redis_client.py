"""
Redis Client for the key-value content store and the tag index
Supports both regular (redis://) and SSL (rediss://) connections through a shared pool
"""

import logging
from urllib.parse import urlparse

import redis.asyncio as redis
from redis.exceptions import RedisError

from .config import RedisConfig
from .errors import StorageError

logger = logging.getLogger(__name__)


async def create_redis_client(config: RedisConfig, timeout: float = 5) -> redis.Redis:
    """
    Create a pooled Redis client and verify it with PING.

    Independent operations draw separate connections from the pool; multi-key
    writes rely on MULTI/EXEC pipelines rather than an application lock.

    Raises:
        StorageError: If the server cannot be reached or authentication fails
    """
    use_ssl = urlparse(config.url).scheme == "rediss"

    # redis.from_url understands rediss:// and enables SSL itself
    pool = redis.ConnectionPool.from_url(
        config.url,
        password=config.password,
        max_connections=config.max_connections,
        decode_responses=True,
        socket_connect_timeout=timeout,
        socket_timeout=timeout,
    )
    client = redis.Redis(connection_pool=pool)

    try:
        await client.ping()
    except RedisError as e:
        await client.aclose()
        await pool.disconnect()
        raise StorageError(f"Failed to connect to Redis: {e}", "redis", "connect")

    logger.info(f"[Redis] Connected to Redis ({'SSL' if use_ssl else 'non-SSL'}, pool size {config.max_connections})")
    return client


async def close_redis_client(client: redis.Redis) -> None:
    """Close the client and disconnect every pooled connection"""
    await client.aclose()
    await client.connection_pool.disconnect()
