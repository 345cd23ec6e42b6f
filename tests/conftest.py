"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- Database fixtures (in-memory SQLite with foreign keys enforced)
- Seed data builders for accounts, sessions and Telegram users
"""

import os
import tempfile
from collections.abc import Callable, Generator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Point the application engine at a throwaway file before src.db.connection
# is imported anywhere, so app startup never touches the user data dir.
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="bizadvisor-tests-")
os.environ.setdefault("BIZADVISOR_DATA_DIR", _TEST_DATA_DIR)
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(_TEST_DATA_DIR, 'app.db')}"
)

from src.db.models import Account, AuthSession, Base, SecondaryIdentity  # noqa: E402


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external services"
    )


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def test_db() -> Generator[Session, None, None]:
    """Create an in-memory SQLite database for testing.

    Creates all tables, yields a session, and cleans up after test.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ============================================================================
# Test Data Fixtures
# ============================================================================


@pytest.fixture
def make_account(test_db: Session) -> Callable[..., Account]:
    """Factory that inserts an account and returns it.

    Usage:
        account = make_account("u1", telegram_username="shopkeeper")
    """

    def _make(account_id: str, **fields) -> Account:
        fields.setdefault("email", f"{account_id}@example.com")
        fields.setdefault("password_hash", "not-a-real-hash")
        account = Account(id=account_id, **fields)
        test_db.add(account)
        test_db.commit()
        return account

    return _make


@pytest.fixture
def make_telegram_user(test_db: Session) -> Callable[..., SecondaryIdentity]:
    """Factory that inserts a Telegram identity and returns it."""

    def _make(telegram_user_id: int, **fields) -> SecondaryIdentity:
        record = SecondaryIdentity(telegram_user_id=telegram_user_id, **fields)
        test_db.add(record)
        test_db.commit()
        return record

    return _make


@pytest.fixture
def make_session(test_db: Session) -> Callable[..., AuthSession]:
    """Factory that inserts an auth session token for an account."""

    def _make(token: str, account_id: str, expires_at: str | None = None) -> AuthSession:
        session = AuthSession(token=token, account_id=account_id, expires_at=expires_at)
        test_db.add(session)
        test_db.commit()
        return session

    return _make
