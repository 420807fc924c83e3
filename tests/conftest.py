"""Pytest fixtures for signalsweep tests."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from signalsweep.models import Base, Signal

# Postgres is optional; in-memory SQLite keeps the suite self-contained
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")


@pytest.fixture(scope="session")
def engine():
    """Create test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Provide a transactional scope around each test."""
    connection = engine.connect()
    transaction = connection.begin()

    session_local = sessionmaker(bind=connection, expire_on_commit=False)
    session = session_local()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 14, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_signal(db_session: Session) -> Callable[..., Signal]:
    """Insert a signal with an explicit creation time."""

    def _make(created_at: datetime, status: str | None = None, kind: str = "offer") -> Signal:
        signal = Signal(
            created_at=created_at,
            status=status,
            room_id="room-1",
            sender_id="peer-a",
            kind=kind,
            payload={"sdp": "v=0"},
        )
        db_session.add(signal)
        db_session.flush()
        return signal

    return _make


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; tests that touch the environment need a clean slate."""
    from signalsweep.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
