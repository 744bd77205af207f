"""
Redis client service - handles only Redis connection management.
"""

from typing import Dict, Optional

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import RedisError

from core.exceptions import StorageException


class RedisClient:
    """Redis-backed durable store. Every failure surfaces as StorageException."""

    def __init__(self, redis_url: str = "redis://localhost:6379"):
        self._redis_url = redis_url
        self._client: Optional[redis.Redis] = None

    async def get_async_client(self) -> redis.Redis:
        """Get async Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self._redis_url, decode_responses=True, health_check_interval=30
            )
        return self._client

    async def get_hash(self, key: str) -> Dict[str, str]:
        """Get every field of a hash, empty dict when the key does not exist."""
        try:
            client = await self.get_async_client()
            return await client.hgetall(key)
        except RedisError as e:
            logger.error(f"Error getting hash {key}: {e}")
            raise StorageException(
                f"Cannot read {key}", operation="hgetall", key=key, original_exception=e
            ) from e

    async def get_hash_field(self, key: str, field: str) -> Optional[str]:
        """Get single field from hash - very fast for lookups."""
        try:
            client = await self.get_async_client()
            return await client.hget(key, field)
        except RedisError as e:
            logger.error(f"Error getting field {field} from hash {key}: {e}")
            raise StorageException(
                f"Cannot read {key}/{field}",
                operation="hget",
                key=key,
                original_exception=e,
            ) from e

    async def set_hash_field(self, key: str, field: str, value: str) -> None:
        """Set single field in hash. Outbox data never expires."""
        try:
            client = await self.get_async_client()
            await client.hset(key, field, value)
        except RedisError as e:
            logger.error(f"Error setting field {field} in hash {key}: {e}")
            raise StorageException(
                f"Cannot write {key}/{field}",
                operation="hset",
                key=key,
                original_exception=e,
            ) from e

    async def delete_hash_fields(self, key: str, *fields: str) -> int:
        """Delete fields from a hash, returns how many existed."""
        if not fields:
            return 0
        try:
            client = await self.get_async_client()
            return await client.hdel(key, *fields)
        except RedisError as e:
            logger.error(f"Error deleting fields from hash {key}: {e}")
            raise StorageException(
                f"Cannot delete from {key}",
                operation="hdel",
                key=key,
                original_exception=e,
            ) from e

    async def ping(self) -> bool:
        try:
            client = await self.get_async_client()
            return bool(await client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self):
        """Close connections."""
        if self._client:
            await self._client.aclose()
            self._client = None
