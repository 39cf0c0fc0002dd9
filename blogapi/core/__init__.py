"""
Core module - data models and shared utilities.
"""

from blogapi.core.models import (
    Comment,
    Entity,
    EntityKind,
    Post,
    Record,
    User,
)
from blogapi.core.utils import configure_logging, generate_id, utc_now

__all__ = [
    "Comment",
    "Entity",
    "EntityKind",
    "Post",
    "Record",
    "User",
    "configure_logging",
    "generate_id",
    "utc_now",
]
