"""
Local storage implementations for development and tests.

These are in-memory implementations that work without any
external services. No method awaits part-way through, so each
call is atomic with respect to other requests on the event loop.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from blogapi.storage.base import (
    CacheStorage,
    MetadataStorage,
    StorageProvider,
)


def _matches(record: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(record.get(key) == value for key, value in filters.items())


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory record storage."""
    
    def __init__(self):
        self._data: dict[str, dict[int, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
    
    async def next_id(self, collection: str) -> int:
        self._sequences[collection] = self._sequences.get(collection, 0) + 1
        return self._sequences[collection]
    
    async def save(self, collection: str, id: int, data: dict[str, Any]) -> None:
        self._data.setdefault(collection, {})[id] = {**copy.deepcopy(data), "id": id}
    
    async def get(self, collection: str, id: int) -> dict[str, Any] | None:
        record = self._data.get(collection, {}).get(id)
        return copy.deepcopy(record) if record is not None else None
    
    async def delete(self, collection: str, id: int) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False
    
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        return self._delete_matching(collection, filters)
    
    def _delete_matching(self, collection: str, filters: dict[str, Any]) -> int:
        records = self._data.get(collection, {})
        doomed = [id for id, record in records.items() if _matches(record, filters)]
        for id in doomed:
            del records[id]
        return len(doomed)
    
    async def save_child(
        self,
        collection: str,
        id: int,
        data: dict[str, Any],
        parent_collection: str,
        parent_id: int,
    ) -> bool:
        if parent_id not in self._data.get(parent_collection, {}):
            return False
        self._data.setdefault(collection, {})[id] = {**copy.deepcopy(data), "id": id}
        return True
    
    async def delete_cascade(self, collection: str, id: int, dependents: dict[str, str]) -> bool:
        if id not in self._data.get(collection, {}):
            return False
        # No awaits below: children and parent go in one step
        for child_collection, field in dependents.items():
            self._delete_matching(child_collection, {field: id})
        del self._data[collection][id]
        return True
    
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        if collection not in self._data:
            return []
        
        results = [
            copy.deepcopy(record)
            for _, record in sorted(self._data[collection].items())
            if _matches(record, filters)
        ]
        
        # Apply pagination
        end = offset + limit if limit is not None else None
        return results[offset:end]
    
    async def update(self, collection: str, id: int, updates: dict[str, Any]) -> dict[str, Any] | None:
        record = self._data.get(collection, {}).get(id)
        if record is None:
            return None
        record.update(copy.deepcopy(updates))
        return copy.deepcopy(record)


# =============================================================================
# In-Memory Cache Storage
# =============================================================================


class InMemoryCacheStorage(CacheStorage):
    """In-memory cache with lazy expiry."""
    
    def __init__(self):
        self._cache: dict[str, tuple[Any, float | None]] = {}
    
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = None
        if ttl:
            expires_at = datetime.now(timezone.utc).timestamp() + ttl
        self._cache[key] = (value, expires_at)
    
    async def get(self, key: str) -> Any | None:
        if key not in self._cache:
            return None
        
        value, expires_at = self._cache[key]
        if expires_at and datetime.now(timezone.utc).timestamp() > expires_at:
            del self._cache[key]
            return None
        
        return value
    
    async def delete(self, key: str) -> bool:
        if key in self._cache:
            del self._cache[key]
            return True
        return False
    
    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with in-memory implementations."""
    return StorageProvider(
        metadata=InMemoryMetadataStorage(),
        cache=InMemoryCacheStorage(),
    )
