"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the database, the application,
HTTP clients and authentication headers.
"""

import base64
import os
import random

import pytest

# Set required environment variables for testing before importing app modules
os.environ.setdefault("KEYCLOAK_REALM", "test-realm")
os.environ.setdefault("KEYCLOAK_CLIENT_ID", "test-client")
os.environ.setdefault("KEYCLOAK_BASE_URL", "http://localhost:8080/")

# In-memory SQLite shared through a single connection (StaticPool)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

# Local basic credentials against the fixture accounts; cheap bcrypt cost
os.environ.setdefault("LOCAL_AUTH_ENABLED", "true")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

FIXTURE_SEED = 1234
ADMIN_EMAIL = "test2.test2@sfr.fr"
USER_EMAIL = "test1.test1@sfr.fr"
PASSWORD = "password"


def basic_auth(email: str, password: str = PASSWORD) -> dict[str, str]:
    """Authorization header for local HTTP Basic credentials."""
    token = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
async def db():
    """
    Fresh schema with the demo fixtures loaded.

    The engine is disposed afterwards, which drops the in-memory database.
    """
    from library_api.storage.db import (
        async_session,
        create_db_and_tables,
        engine,
    )
    from library_api.storage.fixtures import load_fixtures

    await create_db_and_tables(drop_existing=True)
    async with async_session() as session:
        await load_fixtures(session, random.Random(FIXTURE_SEED))

    yield

    await engine.dispose()


@pytest.fixture
async def session(db):
    """Database session over the seeded schema."""
    from library_api.storage.db import async_session

    async with async_session() as session:
        yield session


@pytest.fixture
def app():
    """New application instance (and therefore an empty response cache)."""
    from library_api import application

    return application()


@pytest.fixture
async def client(app, db):
    """
    HTTP client bound to the application.

    ASGITransport does not run the lifespan, so no database wait or Redis
    shutdown happens here; the db fixture prepares the schema instead.
    """
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return basic_auth(ADMIN_EMAIL)


@pytest.fixture
def user_headers() -> dict[str, str]:
    return basic_auth(USER_EMAIL)


@pytest.fixture
def wrong_password_headers() -> dict[str, str]:
    return basic_auth(ADMIN_EMAIL, "wrong-password")


@pytest.fixture
def mock_user_data():
    """
    Provides mock decoded user data from Keycloak token.

    Returns:
        dict: Mock user data with roles and claims
    """
    return {
        "sub": "f86caf01-69b4-4892-ba2d-ffa58fdd5dab",
        "preferred_username": "librarian",
        "email": "librarian@example.com",
        "exp": 9999999999,
        "azp": "test-client",
        "realm_access": {"roles": ["offline_access", "uma_authorization"]},
        "resource_access": {"test-client": {"roles": ["ROLE_ADMIN"]}},
    }
