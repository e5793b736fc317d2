"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of corgiquest.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)
os.environ.pop("SENTRY_DSN", None)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from corgiquest.database.models import (  # noqa: E402
    Base,
    Dog,
    DogStat,
    Household,
    StatType,
    User,
)
from corgiquest.database.seed import seed_cosmetic_items  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Corgi Quest tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def household(db_engine: Engine) -> dict[str, int]:
    """A household with two partners and a dog holding all four stats."""
    with Session(db_engine) as session:
        home = Household()
        session.add(home)
        session.flush()

        dog = Dog(name="Bumi", household_id=home.id, overall_level=1, overall_xp=0)
        alice = User(name="Alice", email="alice@example.com", household_id=home.id)
        bob = User(name="Bob", email="bob@example.com", household_id=home.id)
        session.add_all([dog, alice, bob])
        session.flush()

        for stat_type in StatType:
            session.add(DogStat(dog_id=dog.id, stat_type=stat_type.value, level=1, xp=0))
        session.commit()

        return {
            "household_id": home.id,
            "dog_id": dog.id,
            "alice_id": alice.id,
            "bob_id": bob.id,
        }


@pytest.fixture
def catalogue(db_engine: Engine) -> Engine:
    seed_cosmetic_items(db_engine)
    return db_engine


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT for use in API integration tests."""
    return make_admin_token()


def make_admin_token(sub: str = "tester") -> str:
    """Create an admin JWT.  Usable as both a fixture and a factory function."""
    from corgiquest.api.deps import create_admin_token

    return create_admin_token(sub)


@pytest.fixture
def client(db_engine: Engine):
    """FastAPI TestClient wired to the in-memory engine."""
    from fastapi.testclient import TestClient

    from corgiquest.api.deps import get_engine
    from corgiquest.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
