# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints (mounted under settings.api_prefix):
#   POST /register      - Create account, returns a token
#   POST /login         - Exchange credentials for a token
#   POST /logout        - Revoke the current token
#   POST /refresh       - Swap the current token for a fresh one
#   GET  /user-profile  - Get current user
#
# =============================================================================

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, EmailStr, Field

from blogapi.api.deps import AppServices, get_services, require_auth
from blogapi.api.resources import user_resource
from blogapi.auth.context import AuthContext
from blogapi.auth.gatekeeper import extract_bearer
from blogapi.auth.jwt import IssuedToken
from blogapi.auth.users import UserCreate
from blogapi.core.models import User
from blogapi.errors import InvalidCredentialsError, UnauthenticatedError

router = APIRouter(tags=["auth"])


# =============================================================================
# Request Models
# =============================================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


def _token_response(issued: IssuedToken, user: User) -> dict:
    return {
        "access_token": issued.access_token,
        "token_type": issued.token_type,
        "expires_in": issued.expires_in,
        "user": user_resource(user),
    }


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", status_code=201)
async def register(
    data: UserCreate,
    services: AppServices = Depends(get_services),
):
    """
    Create a new account.

    Returns the user and a bearer token on success.
    """
    user = await services.credentials.register(data)
    issued = services.tokens.issue(user)

    return {
        "message": "User successfully registered",
        "user": user_resource(user),
        "authorization": {
            "token": issued.access_token,
            "type": issued.token_type,
        },
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    services: AppServices = Depends(get_services),
):
    """
    Authenticate and get a token.
    """
    user = await services.credentials.authenticate(data.email, data.password)
    if not user:
        raise InvalidCredentialsError()

    return _token_response(services.tokens.issue(user), user)


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.post("/logout")
async def logout(
    ctx: AuthContext = Depends(require_auth),
    services: AppServices = Depends(get_services),
):
    """
    Logout. The token is put on the deny-list and rejected from now on.
    """
    await services.tokens.invalidate(ctx.token)
    return {"message": "User successfully logged out"}


@router.post("/refresh")
async def refresh(
    authorization: str | None = Header(default=None),
    services: AppServices = Depends(get_services),
):
    """
    Swap the presented token for a new one.

    Goes straight to the token service rather than the gatekeeper so a
    recently expired token can still be refreshed within the grace window.
    """
    issued = await services.tokens.refresh(extract_bearer(authorization))

    user = await services.credentials.get(issued.claims.user_id)
    if not user:
        await services.tokens.invalidate(issued.access_token)
        raise UnauthenticatedError()

    return _token_response(issued, user)


@router.get("/user-profile")
async def user_profile(
    ctx: AuthContext = Depends(require_auth),
    services: AppServices = Depends(get_services),
):
    """
    Get the current authenticated user.
    """
    user = await services.repos.users.find(ctx.user_id)
    return user_resource(user)
