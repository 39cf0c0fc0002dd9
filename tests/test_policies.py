"""
Tests for the ownership policy engine.
"""

import pytest

from blogapi.auth.capabilities import Action, any_authenticated
from blogapi.auth.context import AuthContext
from blogapi.auth.policies import PolicyEngine
from blogapi.core.models import Comment, EntityKind, Post
from blogapi.errors import ForbiddenError


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def owner():
    return AuthContext(user_id=1, user_email="alice@example.com")


@pytest.fixture
def stranger():
    return AuthContext(user_id=2, user_email="bob@example.com")


@pytest.fixture
def post():
    return Post(id=10, user_id=1, title="Hello", body="World")


@pytest.fixture
def comment():
    return Comment(id=20, post_id=10, user_id=1, body="Nice")


# =============================================================================
# Default table
# =============================================================================


class TestOwnershipEnforced:
    @pytest.fixture
    def policy(self):
        return PolicyEngine.default(enforce_ownership=True)

    def test_anyone_authenticated_can_view(self, policy, owner, stranger, post, comment):
        for identity in (owner, stranger):
            assert policy.can_view(identity, post)
            assert policy.can_view(identity, comment)

    def test_owner_can_modify(self, policy, owner, post, comment):
        for entity in (post, comment):
            assert policy.can_update(owner, entity)
            assert policy.can_delete(owner, entity)

    def test_stranger_cannot_modify(self, policy, stranger, post, comment):
        for entity in (post, comment):
            assert not policy.can_update(stranger, entity)
            assert not policy.can_delete(stranger, entity)

    def test_anonymous_is_denied_everything(self, policy, post):
        anon = AuthContext.anonymous()
        
        assert not policy.can_view(anon, post)
        assert not policy.can_update(anon, post)

    def test_check_raises_forbidden(self, policy, stranger, post):
        with pytest.raises(ForbiddenError) as exc:
            policy.check(stranger, Action.DELETE, post)
        assert exc.value.status_code == 403
        assert exc.value.message == "This action is unauthorized."

    def test_check_passes_for_owner(self, policy, owner, post):
        policy.check(owner, Action.UPDATE, post)

    def test_check_accepts_action_strings(self, policy, owner, post):
        policy.check(owner, "delete", post)

    def test_post_owner_cannot_modify_others_comment(self, policy, owner, post):
        # Owning the post does not confer rights on comments under it
        foreign = Comment(id=21, post_id=post.id, user_id=2, body="Hi")
        
        assert not policy.can_update(owner, foreign)


class TestOwnershipDisabled:
    def test_any_user_can_modify(self, stranger, post, comment):
        policy = PolicyEngine.default(enforce_ownership=False)
        
        for entity in (post, comment):
            assert policy.can_update(stranger, entity)
            assert policy.can_delete(stranger, entity)

    def test_anonymous_still_denied(self, post):
        policy = PolicyEngine.default(enforce_ownership=False)
        
        assert not policy.can_update(AuthContext.anonymous(), post)


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    def test_missing_cell_denies(self, owner, post):
        policy = PolicyEngine()
        
        assert policy.registered() == []
        assert not policy.can_view(owner, post)
        with pytest.raises(ForbiddenError):
            policy.check(owner, Action.VIEW, post)

    def test_unknown_action_denies(self, owner, post):
        policy = PolicyEngine.default()
        
        assert not policy.allows(owner, "publish", post)

    def test_register_replaces_rule(self, stranger, post):
        policy = PolicyEngine.default()
        policy.register(EntityKind.POST, Action.DELETE, any_authenticated)
        
        assert policy.can_delete(stranger, post)
        assert not policy.can_update(stranger, post)

    def test_register_accepts_strings(self, owner, post):
        policy = PolicyEngine()
        policy.register("post", "view", any_authenticated)
        
        assert policy.rule_for(EntityKind.POST, Action.VIEW) is any_authenticated
        assert policy.can_view(owner, post)

    def test_default_table_is_complete(self):
        cells = set(PolicyEngine.default().registered())
        
        assert cells == {(kind, action) for kind in EntityKind for action in Action}
