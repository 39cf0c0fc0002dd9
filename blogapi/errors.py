"""
Error taxonomy for the blog API.

Every error the core raises derives from BlogApiError and carries the HTTP
status and client-facing message. The API layer turns these into JSON
responses; nothing below the API layer imports FastAPI.
"""

from __future__ import annotations

from typing import Any


class BlogApiError(Exception):
    """Base exception for all expected API errors."""

    status_code: int = 500
    message: str = "Server Error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


# =============================================================================
# 401 - Authentication
# =============================================================================


class UnauthenticatedError(BlogApiError):
    """No usable identity for this request."""

    status_code = 401
    message = "Unauthenticated."


class TokenError(UnauthenticatedError):
    """Base exception for token errors."""
    pass


class TokenMissingError(TokenError):
    """No token was supplied."""

    message = "Authorization token not found"


class TokenExpiredError(TokenError):
    """Token is correctly signed but past its expiry."""

    message = "Token has expired"


class TokenInvalidError(TokenError):
    """Token is malformed, badly signed, or carries unusable claims."""

    message = "Token is invalid"


class TokenRevokedError(TokenInvalidError):
    """Token was invalidated by logout or refresh."""
    pass


class InvalidCredentialsError(UnauthenticatedError):
    """Email/password pair did not match a user."""

    message = "Unauthorized"


# =============================================================================
# 403 / 404
# =============================================================================


class ForbiddenError(BlogApiError):
    """Authenticated, but the policy denied the action."""

    status_code = 403
    message = "This action is unauthorized."


class NotFoundError(BlogApiError):
    """Entity does not exist or is not reachable through the requested scope."""

    status_code = 404
    message = "Resource not found"

    @classmethod
    def for_entity(cls, kind: str, entity_id: Any) -> NotFoundError:
        return cls(f"{kind.capitalize()} {entity_id} not found")


# =============================================================================
# 422 - Validation
# =============================================================================


class ValidationFailedError(BlogApiError):
    """Input failed validation; carries a field -> messages map."""

    status_code = 422

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        first = next(iter(errors.values()), ["The given data was invalid."])
        super().__init__(first[0])

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


# =============================================================================
# 500 - Fatal
# =============================================================================


class PersistenceTimeoutError(BlogApiError):
    """A storage call exceeded its deadline."""

    status_code = 500
    message = "Server Error"
