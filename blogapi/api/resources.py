"""
JSON shapes for users, posts and comments.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from blogapi.core.models import Comment, Post, User


def _ts(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def user_resource(user: User) -> dict[str, Any]:
    """User as returned to clients (no password hash)."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "created_at": _ts(user.created_at),
        "updated_at": _ts(user.updated_at),
    }


def comment_resource(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user_id": comment.user_id,
        "body": comment.body,
        "created_at": _ts(comment.created_at),
        "updated_at": _ts(comment.updated_at),
    }


def post_resource(post: Post, comments: list[Comment] | None = None) -> dict[str, Any]:
    """Post, with its comments embedded when they were loaded."""
    data = {
        "id": post.id,
        "user_id": post.user_id,
        "title": post.title,
        "body": post.body,
        "created_at": _ts(post.created_at),
        "updated_at": _ts(post.updated_at),
    }
    if comments is not None:
        data["comments"] = [comment_resource(c) for c in comments]
    return data
