"""
tests/conftest.py -- Shared test fixtures for Messagely.

This module provides:
  - settings: a Settings object with a fixed secret and bcrypt cost 4
  - engine / user_store / message_store / credentials / issuer / service:
    the core components over a private in-memory SQLite database
  - api_client: TestClient over the real FastAPI app with a patched lifespan
  - register_user / bearer: small helpers for integration tests

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: databases are per-connection and would present a blank schema to
each worker thread. Unit fixtures run on one thread, so :memory: is fine there.

DEBUG and BCRYPT_ROUNDS must be set before any core import so a stray
get_settings() call never fails for want of a SECRET_KEY, and hashing stays fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any core/auth import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.credentials import CredentialStore
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import Settings
from core.database import create_db_engine
from messages.service import MessagingService
from messages.store import MessageStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters"
DEFAULT_PASSWORD = "secret"


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": TEST_SECRET,
        "bcrypt_rounds": 4,
        "token_expire_seconds": 3600,
    }
    values.update(overrides)
    return Settings(**values)


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture
def user_store(engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def message_store(engine) -> MessageStore:
    return MessageStore(engine)


@pytest.fixture
def credentials(user_store, settings) -> CredentialStore:
    return CredentialStore(user_store, settings)


@pytest.fixture
def issuer(settings) -> TokenIssuer:
    return TokenIssuer(settings)


@pytest.fixture
def service(credentials, user_store, message_store, issuer) -> MessagingService:
    return MessagingService(
        credentials=credentials,
        users=user_store,
        messages=message_store,
        tokens=issuer,
    )


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


@dataclass
class ApiHarness:
    client: TestClient
    settings: Settings


def _patch_lifespan(settings: Settings, engine):
    """Return a lifespan that wires the app to the given settings and engine."""

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, settings, engine)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness around a TestClient with an isolated database.

    Each test gets its own named in-memory database, so registrations in one
    test never collide with another.
    """
    test_settings = make_settings()
    db_url = f"sqlite:///file:test_messagely_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    engine = create_db_engine(db_url)

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(test_settings, engine)
    try:
        with TestClient(app, raise_server_exceptions=True) as client:
            yield ApiHarness(client=client, settings=test_settings)
    finally:
        app.router.lifespan_context = original_lifespan
        engine.dispose()


def register_user(client: TestClient, username: str, password: str = DEFAULT_PASSWORD) -> str:
    """Register username through the API and return its token."""
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "password": password,
            "first_name": username.capitalize(),
            "last_name": "Tester",
            "phone": "555-0100",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
