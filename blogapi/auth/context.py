"""
Auth context - the "who is asking" for each request.

This is the lightweight object the gatekeeper hands to route handlers.
It is passed explicitly into every policy check; nothing reads the
current user from global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from blogapi.auth.jwt import TokenClaims


@dataclass
class AuthContext:
    """
    Authentication context for a request.
    
    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require_auth)):
            policy.check(ctx, Action.UPDATE, post)
    """
    
    # Who
    user_id: int | None = None
    user_email: str | None = None
    user_name: str | None = None
    
    # How they proved it
    token: str | None = field(default=None, repr=False)
    claims: TokenClaims | None = None
    
    # Extra context
    metadata: dict[str, Any] = field(default_factory=dict)
    
    @property
    def is_authenticated(self) -> bool:
        """Is there a logged-in user?"""
        return self.user_id is not None
    
    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None
    
    @property
    def token_id(self) -> str | None:
        return self.claims.jti if self.claims else None
    
    @classmethod
    def anonymous(cls) -> AuthContext:
        """Create an anonymous context (no user)."""
        return cls()
