"""
Dependencies shared by the routers.

Everything a handler needs hangs off `app.state.services`, built once
per app. The only per-request object is the AuthContext produced by
`require_auth`.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, Request

from blogapi.auth.context import AuthContext
from blogapi.auth.gatekeeper import Gatekeeper
from blogapi.auth.jwt import TokenService
from blogapi.auth.policies import PolicyEngine
from blogapi.auth.users import CredentialStore
from blogapi.config import Settings
from blogapi.storage.base import StorageProvider
from blogapi.storage.repository import Repositories


@dataclass
class AppServices:
    """Application services - initialized at startup."""
    
    settings: Settings
    storage: StorageProvider
    repos: Repositories
    tokens: TokenService
    policy: PolicyEngine
    gatekeeper: Gatekeeper
    credentials: CredentialStore
    
    @classmethod
    def build(cls, settings: Settings, storage: StorageProvider) -> AppServices:
        repos = Repositories.from_storage(storage.metadata, settings.persistence_timeout_seconds)
        tokens = TokenService(settings, storage.cache)
        return cls(
            settings=settings,
            storage=storage,
            repos=repos,
            tokens=tokens,
            policy=PolicyEngine.default(settings.enforce_ownership),
            gatekeeper=Gatekeeper(tokens, repos.users),
            credentials=CredentialStore(repos.users, settings.password_hash_iterations),
        )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_repositories(services: AppServices = Depends(get_services)) -> Repositories:
    return services.repos


def get_policy(services: AppServices = Depends(get_services)) -> PolicyEngine:
    return services.policy


async def require_auth(
    request: Request,
    authorization: str | None = Header(default=None),
    services: AppServices = Depends(get_services),
) -> AuthContext:
    """
    Gate a route behind a valid bearer token.
    
    Usage:
        @router.get("/posts")
        async def list_posts(ctx: AuthContext = Depends(require_auth)):
            ...
    """
    ctx = await services.gatekeeper.authenticate(authorization)
    request.state.auth = ctx
    return ctx
