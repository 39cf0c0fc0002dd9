"""
Post routes.

Every route sits behind the gatekeeper. Lookups raise NotFoundError
before the policy is consulted, and the policy is consulted before
anything is written.
"""

from __future__ import annotations

from collections import defaultdict

from fastapi import APIRouter, Depends, Response

from blogapi.api.deps import get_policy, get_repositories, require_auth
from blogapi.api.resources import post_resource
from blogapi.api.schemas import PostPayload
from blogapi.auth.capabilities import Action
from blogapi.auth.context import AuthContext
from blogapi.auth.policies import PolicyEngine
from blogapi.core.models import Comment
from blogapi.storage.repository import Repositories

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    """List every post the caller may view, with its viewable comments."""
    posts = [p for p in await repos.posts.list_all() if policy.can_view(ctx, p)]
    
    comments_by_post: dict[int, list[Comment]] = defaultdict(list)
    for comment in await repos.comments.list_all():
        if policy.can_view(ctx, comment):
            comments_by_post[comment.post_id].append(comment)
    
    return {"data": [post_resource(p, comments_by_post[p.id]) for p in posts]}


@router.post("", status_code=201)
async def create_post(
    payload: PostPayload,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
):
    """Create a post owned by the current user."""
    post = await repos.posts.create({"user_id": ctx.user_id, **payload.model_dump()})
    return {"data": post_resource(post)}


@router.get("/{post_id}")
async def show_post(
    post_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    post = await repos.posts.find(post_id)
    policy.check(ctx, Action.VIEW, post)
    
    comments = [
        c for c in await repos.comments.list_by_parent(post.id) if policy.can_view(ctx, c)
    ]
    return {"data": post_resource(post, comments)}


@router.api_route("/{post_id}", methods=["PUT", "PATCH"])
async def update_post(
    post_id: int,
    payload: PostPayload,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    post = await repos.posts.find(post_id)
    policy.check(ctx, Action.UPDATE, post)
    
    post = await repos.posts.update(post, payload.model_dump())
    return {"data": post_resource(post)}


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int,
    ctx: AuthContext = Depends(require_auth),
    repos: Repositories = Depends(get_repositories),
    policy: PolicyEngine = Depends(get_policy),
):
    """Delete a post and its comments."""
    post = await repos.posts.find(post_id)
    policy.check(ctx, Action.DELETE, post)
    
    await repos.posts.delete(post)
    return Response(status_code=204)
