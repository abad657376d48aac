"""
tests/conftest.py -- Shared test fixtures for the car inventory test suite.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users + cars
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus one bearer token per role
  - clean_cars: empties the cars table so list assertions see known data
  - sample_car(): a valid create payload, overridable per test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any project import:
get_settings() is cached on first call, and api.limiter reads it at import.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Any

# CRITICAL: Set these before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode and the limiter starts disabled.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from api.main import app
from auth.models import Role, User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from inventory.service import CarInventory
from inventory.store import CarStore

# Password shared by every seeded user.
TEST_PASSWORD = "testpass123"


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def sample_car(**overrides: Any) -> dict[str, Any]:
    """Return a valid POST /cars body (camelCase), with overrides applied."""
    body: dict[str, Any] = {
        "brand": "Toyota",
        "carModel": "Camry",
        "year": 2021,
        "price": 15000,
        "mileage": 30000,
        "color": "Red",
        "fuelType": "Petrol",
        "transmission": "Automatic",
        "status": "available",
    }
    body.update(overrides)
    return body


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, CarStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    cars_url = f"sqlite:///file:test_cars_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=users_url), CarStore(db_url=cars_url)


def _seed_users(user_store: UserStore) -> dict[str, str]:
    """Create one active user per role and return {role value: bearer token}."""
    tokens: dict[str, str] = {}
    for role in Role:
        email = f"{role.value}@dealer.test"
        uid = user_store.create_user(
            User(
                email=email,
                first_name=role.value.title(),
                last_name="Tester",
                role=role,
                hashed_password=hash_password(TEST_PASSWORD),
            )
        )
        tokens[role.value] = create_access_token(user_id=uid, email=email, role=role, expire_seconds=3600)
    return tokens


def _patch_lifespan(user_store: UserStore, car_store: CarStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.car_store = car_store
        app.state.inventory = CarInventory(car_store)
        yield

    return test_lifespan


def delete_all_cars(store: CarStore) -> None:
    with store.engine.connect() as conn:
        conn.execute(text("DELETE FROM cars"))
        conn.commit()


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, dict[str, str]], None, None]:
    """Yield (client, tokens) for API integration tests.

    tokens maps "admin", "manager" and "sales" to a valid bearer token for a
    seeded user of that role. Each test module gets its own databases.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, car_store = _make_test_stores(suffix)
    tokens = _seed_users(user_store)

    app.router.lifespan_context = _patch_lifespan(user_store, car_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, tokens

    car_store.close()
    user_store.close()


@pytest.fixture
def clean_cars(api_client) -> Generator[None, None, None]:
    """Start (and leave) the cars table empty."""
    client, _tokens = api_client
    delete_all_cars(client.app.state.car_store)
    yield
    delete_all_cars(client.app.state.car_store)


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def car_store() -> Generator[CarStore, None, None]:
    """Fresh in-memory CarStore per test."""
    store = CarStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    """Fresh in-memory UserStore per test."""
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()
