"""
Comment routes.

Comments are reachable two ways:
- nested under their post: /posts/{post_id}/comments/{comment_id}
- shallow: /comments/{comment_id}

A nested lookup through the wrong post is a 404, decided by the
scoped query and never by the policy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from blogapi.api.deps import get_policy, get_repositories, require_auth
from blogapi.api.resources import comment_resource
from blogapi.api.schemas import CommentPayload
from blogapi.auth.capabilities import Action
from blogapi.auth.context import AuthContext
from blogapi.auth.policies import PolicyEngine
from blogapi.core.models import Comment
from blogapi.storage.repository import Repositories

router = APIRouter(tags=["comments"])


# =============================================================================
# Shared handlers
# =============================================================================


def _show(comment: Comment, ctx: AuthContext, policy: PolicyEngine) -> dict:
    policy.check(ctx, Action.VIEW, comment)
    return {"data": comment_resource(comment)}


async def _update(
    comment: Comment,
    payload: CommentPayload,
    ctx: AuthContext,
    repos: Repositories,
    policy: PolicyEngine,
) -> dict:
    policy.check(ctx, Action.UPDATE, comment)
    comment = await repos.comments.update(comment, payload.model_dump())
    return {"data": comment_resource(comment)}


async def _delete(
    comment: Comment,
    ctx: AuthContext,
    repos: Repositories,
    policy: PolicyEngine,
) -> Response:
    policy.check(ctx, Action.DELETE, comment)
    await repos.comments.delete(comment)
    return Response(status_code=204)


# =============================================================================
# Nested under a post
# =============================================================================


@router.get("/posts/{post_id}/comments")
async def list_comments(
    post_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    """List the viewable comments of a post. Unknown post is a 404."""
    post = await repos.posts.find(post_id)
    comments = await repos.comments.list_by_parent(post.id)
    return {"data": [comment_resource(c) for c in comments if policy.can_view(ctx, c)]}


@router.post("/posts/{post_id}/comments", status_code=201)
async def create_comment(
    post_id: int,
    payload: CommentPayload,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
):
    """Comment on a post as the current user."""
    post = await repos.posts.find(post_id)
    comment = await repos.comments.create({
        "post_id": post.id,
        "user_id": ctx.user_id,
        **payload.model_dump(),
    })
    return {"data": comment_resource(comment)}


@router.get("/posts/{post_id}/comments/{comment_id}")
async def show_scoped_comment(
    post_id: int,
    comment_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find_scoped(post_id, comment_id)
    return _show(comment, ctx, policy)


@router.api_route("/posts/{post_id}/comments/{comment_id}", methods=["PUT", "PATCH"])
async def update_scoped_comment(
    post_id: int,
    comment_id: int,
    payload: CommentPayload,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find_scoped(post_id, comment_id)
    return await _update(comment, payload, ctx, repos, policy)


@router.delete("/posts/{post_id}/comments/{comment_id}", status_code=204)
async def delete_scoped_comment(
    post_id: int,
    comment_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find_scoped(post_id, comment_id)
    return await _delete(comment, ctx, repos, policy)


# =============================================================================
# Shallow
# =============================================================================


@router.get("/comments/{comment_id}")
async def show_comment(
    comment_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find(comment_id)
    return _show(comment, ctx, policy)


@router.api_route("/comments/{comment_id}", methods=["PUT", "PATCH"])
async def update_comment(
    comment_id: int,
    payload: CommentPayload,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find(comment_id)
    return await _update(comment, payload, ctx, repos, policy)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    comment = await repos.comments.find(comment_id)
    return await _delete(comment, ctx, repos, policy)
