"""
Core data models for the blog.

Users author posts; posts own comments. Posts and comments are the
entities the authorization policy reasons about, so both carry an
owner reference (user_id) and a kind tag.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, Union

from pydantic import BaseModel, Field

from blogapi.core.utils import utc_now


# =============================================================================
# Enums
# =============================================================================


class EntityKind(str, Enum):
    """Kinds of entity the policy engine can decide on."""
    
    POST = "post"
    COMMENT = "comment"


# =============================================================================
# Base
# =============================================================================


class Record(BaseModel):
    """Fields shared by every persisted entity."""
    
    id: int
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# User
# =============================================================================


class User(Record):
    """A registered user. Email is unique and stored lower-case."""
    
    name: str
    email: str
    password_hash: str


# =============================================================================
# Post / Comment
# =============================================================================


class Post(Record):
    """A blog post, owned by the user who created it."""
    
    kind: ClassVar[EntityKind] = EntityKind.POST
    
    user_id: int
    title: str
    body: str


class Comment(Record):
    """A comment on exactly one post."""
    
    kind: ClassVar[EntityKind] = EntityKind.COMMENT
    
    post_id: int
    user_id: int
    body: str


# Anything the policy engine can be asked about
Entity = Union[Post, Comment]
