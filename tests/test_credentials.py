"""
Tests for registration and password login.
"""

import asyncio

import pytest

from blogapi.auth.users import CredentialStore, UserCreate
from blogapi.core.models import User
from blogapi.errors import ValidationFailedError
from blogapi.storage import Repositories
from blogapi.storage.local import InMemoryMetadataStorage

from conftest import PASSWORD


class YieldingStorage(InMemoryMetadataStorage):
    """Gives up the event loop on every query, like a networked store would."""

    async def query(self, *args, **kwargs):
        await asyncio.sleep(0)
        return await super().query(*args, **kwargs)


@pytest.fixture
def credentials(repos):
    return CredentialStore(repos.users, iterations=1_000)


def _signup(email="alice@example.com", name="Alice"):
    return UserCreate(name=name, email=email, password=PASSWORD)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_normalizes_email(self, credentials):
        user = await credentials.register(_signup(email="Alice@Example.COM"))
        
        assert user.email == "alice@example.com"
        assert user.password_hash != PASSWORD

    @pytest.mark.asyncio
    async def test_duplicate_email(self, credentials):
        await credentials.register(_signup())
        
        with pytest.raises(ValidationFailedError) as exc:
            await credentials.register(_signup(name="Other"))
        assert exc.value.errors == {"email": ["The email has already been taken."]}

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_create_one_user(self):
        storage = YieldingStorage()
        repos = Repositories.from_storage(storage, timeout=2.0)
        credentials = CredentialStore(repos.users, iterations=1_000)
        
        results = await asyncio.gather(
            credentials.register(_signup(email="dup@example.com")),
            credentials.register(_signup(email="dup@example.com")),
            return_exceptions=True,
        )
        
        assert sorted(type(r).__name__ for r in results) == ["User", "ValidationFailedError"]
        users = await repos.users.list_all()
        assert [u.email for u in users] == ["dup@example.com"]

    @pytest.mark.asyncio
    async def test_concurrent_distinct_emails_both_register(self):
        repos = Repositories.from_storage(YieldingStorage(), timeout=2.0)
        credentials = CredentialStore(repos.users, iterations=1_000)
        
        results = await asyncio.gather(
            credentials.register(_signup(email="a@example.com")),
            credentials.register(_signup(email="b@example.com")),
        )
        
        assert all(isinstance(r, User) for r in results)
        assert {r.id for r in results} == {1, 2}


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_good_and_bad_passwords(self, credentials):
        user = await credentials.register(_signup())
        
        assert (await credentials.authenticate("alice@example.com", PASSWORD)).id == user.id
        assert await credentials.authenticate("alice@example.com", "wrong!") is None
        assert await credentials.authenticate("bob@example.com", PASSWORD) is None

    @pytest.mark.asyncio
    async def test_get_missing_user(self, credentials):
        assert await credentials.get(42) is None
