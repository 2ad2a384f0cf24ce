"""
tests/conftest.py -- Shared test fixtures for Beacon unit and integration tests.

This module provides:
  - db / credential_store / token_registry / ledger: function-scoped stores
    over a private in-memory SQLite database, for unit tests
  - api_client: module-scoped TestClient wired to isolated stores, for
    integration tests through the real ASGI app
  - signup / login / auth_headers: helper fixtures for the integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.registry import TokenRegistry
from auth.store import CredentialStore
from core.config import get_settings
from core.database import Database
from locations.store import LocationLedger

TEST_SECRET_KEY = "test-secret-key-0123456789abcdef0123456789"
PASSWORD = "correct horse battery staple"

# ---------------------------------------------------------------------------
# Unit-test stores
# ---------------------------------------------------------------------------


@pytest.fixture
def db() -> Generator[Database, None, None]:
    database = Database("sqlite:///:memory:")
    database.create_tables()
    yield database
    database.close()


@pytest.fixture
def credential_store(db: Database) -> CredentialStore:
    return CredentialStore(db)


@pytest.fixture
def token_registry(db: Database) -> TokenRegistry:
    return TokenRegistry(db, secret_key=TEST_SECRET_KEY)


@pytest.fixture
def ledger(db: Database) -> LocationLedger:
    return LocationLedger(db)


# ---------------------------------------------------------------------------
# Integration client
# ---------------------------------------------------------------------------


def _patch_lifespan(db: Database):
    """Return an async context manager that replaces the real lifespan.

    Wires the test database and stores into app.state so routes hit an
    isolated in-memory DB instead of the configured one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.settings = settings
        app.state.db = db
        app.state.credential_store = CredentialStore(db)
        app.state.token_registry = TokenRegistry(db, secret_key=settings.secret_key)
        app.state.location_ledger = LocationLedger(db)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient backed by a fresh shared-memory database per test module."""
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    db = Database(f"sqlite:///file:test_beacon_{suffix}?mode=memory&cache=shared&uri=true")
    db.create_tables()

    app.router.lifespan_context = _patch_lifespan(db)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    db.close()


def _auth_headers(token: str) -> dict[str, str]:
    return {get_settings().auth_header_name: token}


def _login(client: TestClient, email: str, device: str = "phone") -> tuple[int, str]:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD, "device": device})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    return data["id"], data["token"]


def _signup(client: TestClient, email: str, device: str = "phone", firstname: str = "Ada") -> tuple[int, int, str]:
    body = {
        "email": email,
        "password": PASSWORD,
        "firstname": firstname,
        "lastname": "Lovelace",
        "city": "London",
        "country": "UK",
    }
    resp = client.post("/api/v1/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    user_id = resp.json()["id"]
    token_id, token = _login(client, email, device)
    return user_id, token_id, token


@pytest.fixture
def auth_headers():
    """Build the token header for a secret: auth_headers(token) -> {"X-Auth-Token": token}."""
    return _auth_headers


@pytest.fixture
def login(api_client: TestClient):
    """Log an existing test user in again: login(email, device) -> (token_id, token)."""
    return lambda email, device="phone": _login(api_client, email, device)


@pytest.fixture
def signup(api_client: TestClient):
    """Register a user and log in once: signup(email, ...) -> (user_id, token_id, token)."""
    return lambda email, device="phone", firstname="Ada": _signup(api_client, email, device, firstname)
