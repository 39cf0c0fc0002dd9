"""
Request gatekeeper - runs before every protected operation.

Each request walks a small state machine:

    UNAUTHENTICATED -> TOKEN_PRESENT -> TOKEN_VALIDATED -> IDENTITY_RESOLVED -> AUTHORIZED
                  \\               \\                 \\
                   `-------------- DENIED <-----------'

Any failure short-circuits to DENIED with the matching error, so token
and identity problems never reach business logic.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import NoReturn

from blogapi.auth.context import AuthContext
from blogapi.auth.jwt import TokenService
from blogapi.errors import (
    NotFoundError,
    TokenError,
    TokenMissingError,
    UnauthenticatedError,
)
from blogapi.storage.repository import UserRepository

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


class GateState(str, Enum):
    """Where a request is in the authentication pipeline."""

    UNAUTHENTICATED = "unauthenticated"
    TOKEN_PRESENT = "token_present"
    TOKEN_VALIDATED = "token_validated"
    IDENTITY_RESOLVED = "identity_resolved"
    AUTHORIZED = "authorized"
    DENIED = "denied"


class GateDenied(UnauthenticatedError):
    """
    Raised when the gate refuses a request.

    Keeps the status and message of the underlying error and records
    the state the request had reached.
    """

    def __init__(self, cause: UnauthenticatedError, reached: GateState):
        self.cause = cause
        self.reached = reached
        self.state = GateState.DENIED
        super().__init__(cause.message)


def extract_bearer(authorization: str | None) -> str | None:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME or not credentials.strip():
        return None
    return credentials.strip()


class Gatekeeper:
    """Turns an Authorization header into an AuthContext, or refuses."""

    def __init__(self, tokens: TokenService, users: UserRepository):
        self.tokens = tokens
        self.users = users

    async def authenticate(self, authorization: str | None) -> AuthContext:
        """
        Run the gate for one request.

        Returns:
            AuthContext for the resolved user (state AUTHORIZED)

        Raises:
            GateDenied: wrapping TokenMissingError, TokenExpiredError,
                TokenInvalidError or UnauthenticatedError
        """
        state = GateState.UNAUTHENTICATED

        token = extract_bearer(authorization)
        if token is None:
            self._deny(state, TokenMissingError())
        state = GateState.TOKEN_PRESENT

        try:
            claims = await self.tokens.validate(token)
        except TokenError as e:
            self._deny(state, e)
        state = GateState.TOKEN_VALIDATED

        try:
            user = await self.users.find(claims.user_id)
        except NotFoundError:
            # Token outlived its user
            self._deny(state, UnauthenticatedError())
        state = GateState.IDENTITY_RESOLVED

        ctx = AuthContext(
            user_id=user.id,
            user_email=user.email,
            user_name=user.name,
            token=token,
            claims=claims,
        )
        ctx.metadata["gate_state"] = GateState.AUTHORIZED
        return ctx

    def _deny(self, reached: GateState, error: UnauthenticatedError) -> NoReturn:
        logger.info("Gate denied at %s: %s", reached.value, type(error).__name__)
        raise GateDenied(error, reached) from error
