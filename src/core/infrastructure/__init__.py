"""
Durable storage backends.
"""

from core.infrastructure.memory_store import InMemoryStore
from core.infrastructure.redis_client import RedisClient
from core.infrastructure.store import KeyValueStore, create_store

__all__ = ["KeyValueStore", "RedisClient", "InMemoryStore", "create_store"]
