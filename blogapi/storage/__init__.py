"""
Storage abstractions.

- MetadataStorage → users, posts, comments
- CacheStorage → token deny-list
"""

from blogapi.storage.base import (
    CacheStorage,
    Collections,
    MetadataStorage,
    StorageProvider,
)
from blogapi.storage.local import create_local_storage
from blogapi.storage.repository import (
    CommentRepository,
    PostRepository,
    Repositories,
    Repository,
    UserRepository,
)

__all__ = [
    "CacheStorage",
    "Collections",
    "MetadataStorage",
    "StorageProvider",
    "create_local_storage",
    "CommentRepository",
    "PostRepository",
    "Repositories",
    "Repository",
    "UserRepository",
]
