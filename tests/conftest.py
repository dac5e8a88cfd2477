"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# A valid JWT_SECRET must exist before creed.api.deps is imported, since the
# secret is validated at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import jwt  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# SQLite has no JSONB; render it as TEXT so the models create cleanly.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.ext.compiler import compiles  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from creed.api.deps import (  # noqa: E402
    JWT_ALGORITHM,
    JWT_SECRET,
    get_config,
    get_engine,
    get_settings_cache,
)
from creed.config import CreedConfig  # noqa: E402
from creed.database.models import Base, ClubRole  # noqa: E402
from creed.engine.cache import SettingsCache  # noqa: E402
from creed.services import member_service, settings_service  # noqa: E402


@compiles(PG_JSONB, "sqlite")
def _compile_jsonb_as_text(type_, compiler, **kw):
    return "TEXT"


MARSHAL_ID = "9000000001"
RIDER_ID = "9000000002"
PASSWORD = "throttle-open"


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with every Creed table.

    StaticPool keeps one shared connection so threads started by
    ``asyncio.to_thread`` see the same database.
    """
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
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def test_config() -> CreedConfig:
    return CreedConfig(club_name="Test Creed", dashboard_port=8000, session_ttl_hours=2)


@pytest.fixture
def members(db_engine):
    """One marshal and one rider, both with password ``PASSWORD``."""
    marshal = member_service.add_rider(
        db_engine, user_id=MARSHAL_ID, name="Arjun", password=PASSWORD,
        club_role=ClubRole.MARSHAL, actor_id="system",
    )
    rider = member_service.add_rider(
        db_engine, user_id=RIDER_ID, name="Meera", password=PASSWORD,
        actor_id="system",
    )
    return marshal, rider


def make_token(sub: str, *, name: str = "Fixture", is_marshal: bool = False) -> str:
    """Create a session JWT.  Usable as a factory inside tests."""
    return jwt.encode(
        {
            "sub": sub,
            "name": name,
            "club_role": ClubRole.MARSHAL if is_marshal else ClubRole.RIDER,
            "is_marshal": is_marshal,
        },
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def marshal_headers() -> dict:
    return auth(make_token(MARSHAL_ID, name="Arjun", is_marshal=True))


@pytest.fixture
def rider_headers() -> dict:
    return auth(make_token(RIDER_ID, name="Meera"))


@pytest.fixture
def settings_cache(db_engine) -> SettingsCache:
    return SettingsCache(lambda: settings_service.get_club_settings(db_engine))


@pytest.fixture
def client(db_engine, test_config, settings_cache):
    """TestClient wired to the in-memory database.

    Used without a ``with`` block so the lifespan (which would reach for
    DATABASE_URL) never runs.
    """
    from fastapi.testclient import TestClient

    from creed.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_settings_cache] = lambda: settings_cache
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
