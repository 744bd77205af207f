"""
Durable key-value store contract and factory.
"""

from typing import Dict, Optional, Protocol, Union

from loguru import logger

from core.infrastructure.memory_store import InMemoryStore
from core.infrastructure.redis_client import RedisClient


class KeyValueStore(Protocol):
    """Hash-oriented store the managers serialize their state into."""

    async def get_hash(self, key: str) -> Dict[str, str]: ...

    async def get_hash_field(self, key: str, field: str) -> Optional[str]: ...

    async def set_hash_field(self, key: str, field: str, value: str) -> None: ...

    async def delete_hash_fields(self, key: str, *fields: str) -> int: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


def create_store(
    redis_url: Optional[str] = None, use_redis: bool = False
) -> Union[RedisClient, InMemoryStore]:
    """Build the durable store, falling back to memory when Redis is disabled."""
    if use_redis and redis_url:
        try:
            store = RedisClient(redis_url)
            logger.info("Using Redis for durable storage")
            return store
        except Exception as e:
            logger.warning(f"Redis failed, using memory: {e}")
    logger.warning("Using in-memory storage - outbox will not survive restarts")
    return InMemoryStore()
