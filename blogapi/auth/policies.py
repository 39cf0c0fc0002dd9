"""
Policies - the authorization decision table.

Decisions are looked up by (entity kind, action) and evaluated against
an explicit AuthContext. New entity kinds or actions register a rule;
call sites never change.

Design:
- `PolicyEngine.can_*()` answers allow/deny with no side effects
- `PolicyEngine.check()` raises ForbiddenError on deny
- A (kind, action) with no registered rule is denied
"""

from __future__ import annotations

import logging

from blogapi.auth.capabilities import Action, Rule, default_rules
from blogapi.auth.context import AuthContext
from blogapi.core.models import Entity, EntityKind
from blogapi.errors import ForbiddenError

logger = logging.getLogger(__name__)


class PolicyEngine:
    """
    Pluggable decision table keyed by (EntityKind, Action).

    Usage:
        policy = PolicyEngine.default()
        if policy.can_update(ctx, post):
            ...
        policy.check(ctx, Action.DELETE, comment)  # raises if denied
    """

    def __init__(self, rules: dict[tuple[EntityKind, Action], Rule] | None = None):
        self._rules: dict[tuple[EntityKind, Action], Rule] = dict(rules or {})

    @classmethod
    def default(cls, enforce_ownership: bool = True) -> PolicyEngine:
        """Engine preloaded with the post/comment rules."""
        return cls(default_rules(enforce_ownership))

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, kind: EntityKind | str, action: Action | str, rule: Rule) -> None:
        """Add or replace the rule for one (kind, action) cell."""
        self._rules[(EntityKind(kind), Action(action))] = rule

    def rule_for(self, kind: EntityKind, action: Action) -> Rule | None:
        return self._rules.get((kind, action))

    def registered(self) -> list[tuple[EntityKind, Action]]:
        """List every (kind, action) with a rule."""
        return list(self._rules.keys())

    # =========================================================================
    # Decisions
    # =========================================================================

    def allows(self, identity: AuthContext, action: Action | str, entity: Entity) -> bool:
        """Look up and evaluate the rule. Unknown cells deny."""
        try:
            action = Action(action)
        except ValueError:
            return False

        rule = self._rules.get((entity.kind, action))
        if rule is None:
            return False
        return bool(rule(identity, entity))

    def can_view(self, identity: AuthContext, entity: Entity) -> bool:
        return self.allows(identity, Action.VIEW, entity)

    def can_update(self, identity: AuthContext, entity: Entity) -> bool:
        return self.allows(identity, Action.UPDATE, entity)

    def can_delete(self, identity: AuthContext, entity: Entity) -> bool:
        return self.allows(identity, Action.DELETE, entity)

    def check(self, identity: AuthContext, action: Action | str, entity: Entity) -> None:
        """
        Raise ForbiddenError unless the identity may act on the entity.

        Called before any mutation, so a denial never leaves partial writes.
        """
        if not self.allows(identity, action, entity):
            logger.info(
                "Denied %s on %s %s for user %s",
                getattr(action, "value", action), entity.kind.value, entity.id, identity.user_id,
            )
            raise ForbiddenError()
