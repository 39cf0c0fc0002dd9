"""
Actions and the default ownership rules.

This defines WHAT users can do to posts and comments, not HOW we
check it. The actual lookup and enforcement happens in policies.py.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable

from blogapi.core.models import Entity, EntityKind

if TYPE_CHECKING:
    from blogapi.auth.context import AuthContext


class Action(str, Enum):
    """What a requester wants to do with an entity."""
    
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"


# A rule decides one (kind, action) cell of the table
Rule = Callable[["AuthContext", Entity], bool]


# =============================================================================
# Rules
# =============================================================================


def any_authenticated(identity: AuthContext, entity: Entity) -> bool:
    """Any logged-in user."""
    return identity.is_authenticated


def owner_only(identity: AuthContext, entity: Entity) -> bool:
    """Only the user who created the entity."""
    return identity.is_authenticated and entity.user_id == identity.user_id


# =============================================================================
# Default Tables
# =============================================================================


def default_rules(enforce_ownership: bool = True) -> dict[tuple[EntityKind, Action], Rule]:
    """
    The decision table for posts and comments.
    
    Everyone authenticated can view. Update and delete are owner-only
    unless ownership is switched off, in which case any authenticated
    user may modify anything.
    """
    modify = owner_only if enforce_ownership else any_authenticated
    
    rules: dict[tuple[EntityKind, Action], Rule] = {}
    for kind in (EntityKind.POST, EntityKind.COMMENT):
        rules[(kind, Action.VIEW)] = any_authenticated
        rules[(kind, Action.UPDATE)] = modify
        rules[(kind, Action.DELETE)] = modify
    return rules
