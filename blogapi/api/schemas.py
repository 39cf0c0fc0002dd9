"""
Request bodies for posts and comments.

Validation happens here, before any persistence call.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PostPayload(BaseModel):
    """Body for creating or replacing a post."""
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)


class CommentPayload(BaseModel):
    """Body for creating or replacing a comment."""
    body: str = Field(min_length=1)
