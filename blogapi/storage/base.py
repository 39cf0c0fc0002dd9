"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → SQL, in-memory cache → Redis)
without changing application code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


# =============================================================================
# Storage Interfaces
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured records (users, posts, comments).
    
    Records are plain dicts keyed by integer ID within a collection.
    Each call is one atomic operation against the store.
    """
    
    @abstractmethod
    async def next_id(self, collection: str) -> int:
        """Allocate the next integer ID for a collection."""
        pass
    
    @abstractmethod
    async def save(self, collection: str, id: int, data: dict[str, Any]) -> None:
        """Save a record to a collection."""
        pass
    
    @abstractmethod
    async def get(self, collection: str, id: int) -> dict[str, Any] | None:
        """Get a record by ID."""
        pass
    
    @abstractmethod
    async def delete(self, collection: str, id: int) -> bool:
        """Delete a record. Returns False if it did not exist."""
        pass
    
    @abstractmethod
    async def delete_many(self, collection: str, filters: dict[str, Any]) -> int:
        """Delete every record matching all filters. Returns the count."""
        pass
    
    @abstractmethod
    async def save_child(
        self,
        collection: str,
        id: int,
        data: dict[str, Any],
        parent_collection: str,
        parent_id: int,
    ) -> bool:
        """
        Save a record only if its parent record exists, in one step.
        
        Returns False (and saves nothing) when the parent is missing.
        """
        pass
    
    @abstractmethod
    async def delete_cascade(self, collection: str, id: int, dependents: dict[str, str]) -> bool:
        """
        Delete a record and every dependent record, in one step.
        
        `dependents` maps a collection name to the field holding the
        parent ID. Returns False (and deletes nothing) if the record
        did not exist.
        """
        pass
    
    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query records in ID order with optional equality filters."""
        pass
    
    @abstractmethod
    async def update(self, collection: str, id: int, updates: dict[str, Any]) -> dict[str, Any] | None:
        """Partial update of a record. Returns the new record, or None if missing."""
        pass


class CacheStorage(ABC):
    """
    Fast key-value cache with expiry (token deny-list, etc).
    
    Production implementation: Redis
    Local implementation: in-memory dict
    """
    
    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set a value with optional TTL in seconds."""
        pass
    
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Get a value."""
        pass
    
    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key."""
        pass
    
    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.
    
    Initialize once at app startup with appropriate implementations.
    Repositories and the token service receive this and use the
    interfaces without knowing the underlying implementation.
    """
    
    model_config = {"arbitrary_types_allowed": True}
    
    metadata: MetadataStorage
    cache: CacheStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""
    
    USERS = "users"
    POSTS = "posts"
    COMMENTS = "comments"
