# =============================================================================
# JWT Authentication Implementation
# =============================================================================
#
# This module provides the token side of authentication:
#   - Password hashing
#   - Token issuance
#   - Token validation (signature, then expiry, then revocation)
#   - Refresh with a grace window
#   - Invalidation (logout) through a jti deny-list
#
# Tokens are stateless: nothing is stored when one is minted. The only
# server-side state is the deny-list of revoked token IDs, kept in
# CacheStorage with a TTL covering the token's remaining usable life.
#
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import re
import secrets

from pydantic import BaseModel
import jwt

from blogapi.config import Settings
from blogapi.core.models import User
from blogapi.core.utils import generate_id, utc_now
from blogapi.errors import (
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
    TokenRevokedError,
)
from blogapi.storage.base import CacheStorage

logger = logging.getLogger(__name__)

REVOKED_KEY_PREFIX = "revoked_jti:"
REQUIRED_CLAIMS = ["sub", "exp", "iat", "jti"]
SUBJECT_PATTERN = re.compile(r"[0-9]+")


# =============================================================================
# Models
# =============================================================================

class TokenClaims(BaseModel):
    """Decoded, verified JWT payload."""
    sub: str  # user id
    exp: datetime
    iat: datetime
    jti: str  # unique token ID (for revocation)

    @property
    def user_id(self) -> int:
        return int(self.sub)


class IssuedToken(BaseModel):
    """A freshly minted bearer token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the token expires
    claims: TokenClaims


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str, iterations: int = 100_000) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: iterations:salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=iterations,
    )
    return f"{iterations}:{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        iterations, salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=int(iterations),
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


# =============================================================================
# Token Service
# =============================================================================

class TokenService:
    """
    Issues, validates, refreshes and invalidates bearer tokens.

    Usage:
        tokens = TokenService(settings, storage.cache)
        issued = tokens.issue(user)
        claims = await tokens.validate(issued.access_token)
        await tokens.invalidate(issued.access_token)  # logout
    """

    def __init__(self, settings: Settings, cache: CacheStorage):
        self.settings = settings
        self.cache = cache

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.jwt_ttl_minutes)

    @property
    def refresh_grace(self) -> timedelta:
        return timedelta(minutes=self.settings.jwt_refresh_grace_minutes)

    # =========================================================================
    # Issue
    # =========================================================================

    def issue(self, user: User) -> IssuedToken:
        """Mint a token for a user. No persisted side effect."""
        return self._mint(str(user.id))

    def _mint(self, subject: str) -> IssuedToken:
        now = utc_now().replace(microsecond=0)
        expire = now + self.ttl

        payload = {
            "iss": self.settings.jwt_issuer,
            "sub": subject,
            "iat": now,
            "nbf": now,
            "exp": expire,
            "jti": generate_id("tok"),
        }
        token = jwt.encode(payload, self.settings.jwt_secret_key, algorithm=self.settings.jwt_algorithm)

        logger.debug("Issued token %s for user %s", payload["jti"], subject)
        return IssuedToken(
            access_token=token,
            expires_in=int(self.ttl.total_seconds()),
            claims=TokenClaims(sub=subject, exp=expire, iat=now, jti=payload["jti"]),
        )

    # =========================================================================
    # Validate
    # =========================================================================

    def _decode(self, token: str | None, verify_exp: bool = True) -> TokenClaims:
        """
        Verify signature and claims.

        Raises:
            TokenMissingError: No token supplied
            TokenExpiredError: Correctly signed but expired
            TokenInvalidError: Anything else wrong with it
        """
        if token is None or not token.strip():
            raise TokenMissingError()

        try:
            payload = jwt.decode(
                token.strip(),
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
                issuer=self.settings.jwt_issuer,
                options={"require": REQUIRED_CLAIMS, "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            raise TokenInvalidError() from e

        if not SUBJECT_PATTERN.fullmatch(str(payload["sub"])):
            raise TokenInvalidError()

        return TokenClaims(
            sub=str(payload["sub"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            jti=str(payload["jti"]),
        )

    async def validate(self, token: str | None) -> TokenClaims:
        """Decode and verify a token, then check it has not been revoked."""
        claims = self._decode(token)
        if await self.is_revoked(claims.jti):
            raise TokenRevokedError()
        return claims

    # =========================================================================
    # Refresh
    # =========================================================================

    async def refresh(self, token: str | None) -> IssuedToken:
        """
        Exchange a token for a new one with a fresh expiry.

        The old token may be expired by up to the refresh grace window.
        It is revoked once the new token is minted, so it refreshes once.
        """
        claims = self._decode(token, verify_exp=False)

        if utc_now() > claims.exp + self.refresh_grace:
            raise TokenExpiredError()
        if await self.is_revoked(claims.jti):
            raise TokenRevokedError()

        issued = self._mint(claims.sub)
        await self._revoke(claims)
        logger.info("Refreshed token %s -> %s for user %s", claims.jti, issued.claims.jti, claims.sub)
        return issued

    # =========================================================================
    # Invalidate
    # =========================================================================

    async def invalidate(self, token: str | None) -> None:
        """
        Logout. Puts the token's jti on the deny-list.

        An expired token is still revoked while it is inside the refresh
        grace window, since it could otherwise be refreshed. A token past
        that window, or one that fails to decode, is left alone.
        """
        try:
            claims = self._decode(token, verify_exp=False)
        except TokenError as e:
            logger.debug("Ignoring invalidate for unusable token: %s", e.message)
            return
        if utc_now() > claims.exp + self.refresh_grace:
            logger.debug("Ignoring invalidate for token %s past the refresh window", claims.jti)
            return
        await self._revoke(claims)
        logger.info("Revoked token %s for user %s", claims.jti, claims.sub)

    async def is_revoked(self, jti: str) -> bool:
        return await self.cache.exists(REVOKED_KEY_PREFIX + jti)

    async def _revoke(self, claims: TokenClaims) -> None:
        # Outlive the refresh grace window so a revoked token can't be refreshed
        remaining = (claims.exp + self.refresh_grace) - utc_now()
        ttl = max(int(remaining.total_seconds()), 1)
        await self.cache.set(REVOKED_KEY_PREFIX + claims.jti, claims.sub, ttl=ttl)
