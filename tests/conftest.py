"""
tests/conftest.py -- Shared test fixtures for SessionKit.

This module provides:
  - TEST_SECRET / NOW: fixed secret and clock value for deterministic tokens
  - user_store: isolated in-memory UserStore per test
  - sessions: SessionManager bound to TEST_SECRET with a frozen clock
  - api_client: TestClient over the real app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
api_client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format shares one in-memory instance across
all connections in the same process.

Environment must be set before any api/ import: api.main reads Settings at
import time (allowed hosts, rate limit) and get_settings() caches the result.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any api/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.gate import AccessGate
from auth.passwords import hash_password
from auth.sessions import SessionManager
from auth.store import UserStore

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef"
NOW = 1_700_000_000
TEST_ROUNDS = 4

API_USERNAME = "testuser"
API_PASSWORD = "testpass123"


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def sessions() -> SessionManager:
    """SessionManager with a one-hour TTL and a clock frozen at NOW."""
    return SessionManager(secret=TEST_SECRET, ttl=3600, clock=lambda: NOW)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, sessions: SessionManager):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test objects into app.state so TestClient routes see
    an isolated test DB and a known secret rather than production settings.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.sessions = sessions
        app.state.gate = AccessGate(sessions)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The user "testuser" / "testpass123" exists before the client starts, and
    token is a valid bearer token for it. Sessions use the real clock here so
    tokens minted by login stay valid for the module's duration.
    """
    db_name = request.module.__name__.replace(".", "_")
    user_store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    uid = user_store.insert(API_USERNAME, hash_password(API_PASSWORD, TEST_ROUNDS), "testuser@example.com")

    sessions = SessionManager(secret=TEST_SECRET, ttl=3600)
    token = sessions.issue(uid, API_USERNAME)

    app.router.lifespan_context = _patch_lifespan(user_store, sessions)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    user_store.close()
