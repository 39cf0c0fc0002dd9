"""
Typed repositories over MetadataStorage.

A repository is the persistence collaborator the request layer talks to:
find / find_scoped / create / update / delete / list_all / list_by_parent.
Every storage call runs under a deadline; a missed deadline surfaces as
PersistenceTimeoutError rather than hanging the request.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from blogapi.core.models import Comment, Post, Record, User
from blogapi.core.utils import utc_now
from blogapi.errors import NotFoundError, PersistenceTimeoutError
from blogapi.storage.base import Collections, MetadataStorage

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)
R = TypeVar("R")


class Repository(Generic[T]):
    """Generic CRUD over one collection."""
    
    model: type[T]
    collection: str
    kind: str
    parent_field: str | None = None
    parent_collection: str | None = None
    parent_kind: str | None = None
    
    def __init__(self, storage: MetadataStorage, timeout: float | None = None):
        self.storage = storage
        self.timeout = timeout
    
    async def _call(self, awaitable: Awaitable[R], timeout: float | None = None) -> R:
        deadline = timeout if timeout is not None else self.timeout
        try:
            return await asyncio.wait_for(awaitable, deadline)
        except asyncio.TimeoutError as e:
            logger.error("Storage call on %s exceeded %ss deadline", self.collection, deadline)
            raise PersistenceTimeoutError() from e
    
    def _load(self, record: dict[str, Any]) -> T:
        return self.model.model_validate(record)
    
    # =========================================================================
    # Reads
    # =========================================================================
    
    async def find(self, id: int, *, timeout: float | None = None) -> T:
        """Get by ID or raise NotFoundError."""
        record = await self._call(self.storage.get(self.collection, id), timeout)
        if record is None:
            raise NotFoundError.for_entity(self.kind, id)
        return self._load(record)
    
    async def find_scoped(self, parent_id: int, id: int, *, timeout: float | None = None) -> T:
        """
        Get by ID, but only if it belongs to parent_id.
        
        A record reached through the wrong parent is reported as missing,
        not as forbidden.
        """
        if self.parent_field is None:
            raise TypeError(f"{type(self).__name__} has no parent scope")
        record = await self._call(self.storage.get(self.collection, id), timeout)
        if record is None or record.get(self.parent_field) != parent_id:
            raise NotFoundError.for_entity(self.kind, id)
        return self._load(record)
    
    async def list_all(self, *, timeout: float | None = None) -> list[T]:
        records = await self._call(self.storage.query(self.collection), timeout)
        return [self._load(r) for r in records]
    
    async def list_by_parent(self, parent_id: int, *, timeout: float | None = None) -> list[T]:
        if self.parent_field is None:
            raise TypeError(f"{type(self).__name__} has no parent scope")
        records = await self._call(
            self.storage.query(self.collection, {self.parent_field: parent_id}),
            timeout,
        )
        return [self._load(r) for r in records]
    
    # =========================================================================
    # Writes
    # =========================================================================
    
    async def create(self, fields: dict[str, Any], *, timeout: float | None = None) -> T:
        id = await self._call(self.storage.next_id(self.collection), timeout)
        now = utc_now()
        entity = self.model(id=id, created_at=now, updated_at=now, **fields)
        
        if self.parent_field is None:
            await self._call(self.storage.save(self.collection, id, entity.model_dump()), timeout)
        else:
            # Parent existence is re-checked by the store in the same step as the write
            parent_id = fields[self.parent_field]
            saved = await self._call(
                self.storage.save_child(
                    self.collection, id, entity.model_dump(), self.parent_collection, parent_id,
                ),
                timeout,
            )
            if not saved:
                raise NotFoundError.for_entity(self.parent_kind, parent_id)
        logger.debug("Created %s %s", self.kind, id)
        return entity
    
    async def update(self, entity: T, fields: dict[str, Any], *, timeout: float | None = None) -> T:
        updates = {**fields, "updated_at": utc_now()}
        record = await self._call(self.storage.update(self.collection, entity.id, updates), timeout)
        if record is None:
            raise NotFoundError.for_entity(self.kind, entity.id)
        return self._load(record)
    
    async def delete(self, entity: T, *, timeout: float | None = None) -> None:
        deleted = await self._call(self.storage.delete(self.collection, entity.id), timeout)
        if not deleted:
            raise NotFoundError.for_entity(self.kind, entity.id)
        logger.debug("Deleted %s %s", self.kind, entity.id)


# =============================================================================
# Concrete repositories
# =============================================================================


class UserRepository(Repository[User]):
    model = User
    collection = Collections.USERS
    kind = "user"
    
    async def find_by_email(self, email: str, *, timeout: float | None = None) -> User | None:
        records = await self._call(
            self.storage.query(self.collection, {"email": email.strip().lower()}, limit=1),
            timeout,
        )
        return self._load(records[0]) if records else None


class PostRepository(Repository[Post]):
    model = Post
    collection = Collections.POSTS
    kind = "post"
    
    async def delete(self, post: Post, *, timeout: float | None = None) -> None:
        """Delete the post and every comment on it, or neither."""
        deleted = await self._call(
            self.storage.delete_cascade(self.collection, post.id, {Collections.COMMENTS: "post_id"}),
            timeout,
        )
        if not deleted:
            raise NotFoundError.for_entity(self.kind, post.id)
        logger.debug("Deleted post %s with its comments", post.id)


class CommentRepository(Repository[Comment]):
    model = Comment
    collection = Collections.COMMENTS
    kind = "comment"
    parent_field = "post_id"
    parent_collection = Collections.POSTS
    parent_kind = "post"


@dataclass
class Repositories:
    """The repositories a request handler needs, bound to one store."""
    
    users: UserRepository
    posts: PostRepository
    comments: CommentRepository
    
    @classmethod
    def from_storage(cls, storage: MetadataStorage, timeout: float | None = None) -> Repositories:
        return cls(
            users=UserRepository(storage, timeout),
            posts=PostRepository(storage, timeout),
            comments=CommentRepository(storage, timeout),
        )
