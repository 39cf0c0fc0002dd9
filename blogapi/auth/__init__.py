"""
Authentication and authorization.

Design principles:
1. One gate (the Gatekeeper) in front of every protected route
2. Stateless bearer tokens, with a jti deny-list for logout/refresh
3. Ownership-based decisions from a (kind, action) table
4. Identity passed explicitly, never read from global state
"""

from blogapi.auth.capabilities import Action, default_rules, owner_only, any_authenticated
from blogapi.auth.context import AuthContext
from blogapi.auth.gatekeeper import Gatekeeper, GateDenied, GateState, extract_bearer
from blogapi.auth.jwt import (
    IssuedToken,
    TokenClaims,
    TokenService,
    hash_password,
    verify_password,
)
from blogapi.auth.policies import PolicyEngine
from blogapi.auth.users import CredentialStore, UserCreate

__all__ = [
    # Main interface
    "Gatekeeper",
    "PolicyEngine",
    "TokenService",
    "CredentialStore",
    "AuthContext",
    # Types
    "Action",
    "GateState",
    "GateDenied",
    "IssuedToken",
    "TokenClaims",
    "UserCreate",
    # Rules
    "default_rules",
    "owner_only",
    "any_authenticated",
    # Helpers
    "extract_bearer",
    "hash_password",
    "verify_password",
]
