"""
In-memory store with the same interface as RedisClient.
State lives only as long as the process.
"""

from typing import Dict, Optional


class InMemoryStore:
    def __init__(self):
        self._hashes: Dict[str, Dict[str, str]] = {}

    async def get_hash(self, key: str) -> Dict[str, str]:
        return dict(self._hashes.get(key, {}))

    async def get_hash_field(self, key: str, field: str) -> Optional[str]:
        return self._hashes.get(key, {}).get(field)

    async def set_hash_field(self, key: str, field: str, value: str) -> None:
        self._hashes.setdefault(key, {})[field] = value

    async def delete_hash_fields(self, key: str, *fields: str) -> int:
        bucket = self._hashes.get(key, {})
        removed = 0
        for field in fields:
            if bucket.pop(field, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True

    async def close(self):
        pass
