"""
Credential store - registration and password login.

Sits on top of the user repository; the only module that sees
plain-text passwords.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, EmailStr, Field

from blogapi.auth.jwt import hash_password, verify_password
from blogapi.core.models import User
from blogapi.errors import NotFoundError, ValidationFailedError
from blogapi.storage.repository import UserRepository

logger = logging.getLogger(__name__)


class UserCreate(BaseModel):
    """User registration data."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=6)


class CredentialStore:
    """Creates users and checks their credentials."""

    def __init__(self, users: UserRepository, iterations: int = 100_000):
        self.users = users
        self.iterations = iterations
        # Serializes the email check and the insert
        self._register_lock = asyncio.Lock()

    async def register(self, data: UserCreate) -> User:
        """
        Create a new user.

        Raises:
            ValidationFailedError: Email already registered
        """
        email = str(data.email).strip().lower()
        password_hash = hash_password(data.password, self.iterations)

        async with self._register_lock:
            if await self.users.find_by_email(email):
                raise ValidationFailedError({"email": ["The email has already been taken."]})

            user = await self.users.create({
                "name": data.name.strip(),
                "email": email,
                "password_hash": password_hash,
            })
        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate user by email and password."""
        user = await self.users.find_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def get(self, user_id: int) -> User | None:
        """Get user by ID."""
        try:
            return await self.users.find(user_id)
        except NotFoundError:
            return None
