"""
Pytest fixtures for the test suite.

Every test gets a fresh in-memory SQLite database. ``StaticPool`` keeps a
single connection so the FastAPI test client (which runs sync handlers in a
thread pool) sees the same database as the test body.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


TEST_DB_URL = "sqlite://"
SECURITY_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "security_config.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from ticketdesk.db.base import Base
    import ticketdesk.models.security  # noqa: F401
    import ticketdesk.models.tickets  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """Provide a Session bound to the per-test database."""
    TestSession = sessionmaker(bind=tables, autoflush=False, class_=Session)
    session = TestSession()
    yield session
    session.close()


@pytest.fixture
def seeded(db_session):
    """Database with the four reserved roles at their default maps."""
    from ticketdesk.db.init_db import seed_reserved_roles

    seed_reserved_roles(db_session)
    return db_session


@pytest.fixture
def make_identity(db_session):
    """Factory: persist an approved identity with the given role."""
    from ticketdesk.models.security import Identity

    counter = {"n": 0}

    def _make(role: str, email: str | None = None, approved: bool = True) -> Identity:
        counter["n"] += 1
        n = counter["n"]
        identity = Identity(
            display_name=f"Person {n}",
            email=email or f"person{n}@example.com",
            role=role,
            approved=approved,
        )
        db_session.add(identity)
        db_session.commit()
        return identity

    return _make


@pytest.fixture
def client(seeded):
    """Test client with the request DB dependency pointed at the test session."""
    from ticketdesk.db.session import get_db
    from ticketdesk.main import create_app
    from ticketdesk.security.config import load_security_config

    app = create_app()
    app.state.security_config = load_security_config(SECURITY_CONFIG_PATH)

    def _get_test_db():
        yield seeded

    app.dependency_overrides[get_db] = _get_test_db
    return TestClient(app)


@pytest.fixture
def bearer():
    """Build the demo session header for an identity."""

    def _bearer(identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity.id}"}

    return _bearer
