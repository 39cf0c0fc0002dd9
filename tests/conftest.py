"""
Shared fixtures: settings, in-memory storage, an app and a client.
"""

from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

from blogapi.api.app import create_app
from blogapi.auth.jwt import TokenService
from blogapi.config import Settings
from blogapi.core.models import User
from blogapi.core.utils import utc_now
from blogapi.storage import Repositories, create_local_storage

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
PASSWORD = "secret123"


def forge_token(sub="1", issued_minutes_ago=0, ttl_minutes=60, secret=TEST_SECRET, **extra) -> str:
    """Hand-build a token with arbitrary timing."""
    iat = utc_now().replace(microsecond=0) - timedelta(minutes=issued_minutes_ago)
    payload = {
        "iss": "blogapi",
        "sub": sub,
        "iat": iat,
        "nbf": iat,
        "exp": iat + timedelta(minutes=ttl_minutes),
        "jti": "tok_forged",
        **extra,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings for tests - cheap hashing, no Sentry, no .env."""
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret_key=TEST_SECRET,
        password_hash_iterations=1_000,
        sentry_dsn="",
        persistence_timeout_seconds=2.0,
    )


@pytest.fixture
def storage():
    return create_local_storage()


@pytest.fixture
def repos(storage, settings):
    return Repositories.from_storage(storage.metadata, settings.persistence_timeout_seconds)


@pytest.fixture
def tokens(settings, storage):
    return TokenService(settings, storage.cache)


@pytest.fixture
def user():
    return User(id=1, name="Alice", email="alice@example.com", password_hash="x")


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def app(settings, storage):
    return create_app(settings=settings, storage=storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def register(client: TestClient, name: str, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    """Registered user; returns (user dict, auth headers)."""
    body = register(client, "Alice", "alice@example.com")
    return body["user"], bearer(body["authorization"]["token"])


@pytest.fixture
def bob(client):
    body = register(client, "Bob", "bob@example.com")
    return body["user"], bearer(body["authorization"]["token"])
