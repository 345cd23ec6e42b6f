"""Database connection management for BizAdvisor.

Provides synchronous database access using SQLAlchemy. Async request
handlers pass their request-scoped session to services and call them
through asyncio.to_thread.

Usage:
    # Sync (for FastAPI Depends)
    from src.db.connection import get_db, init_db

    init_db()  # Create tables
    db = next(get_db())
    # ... use db session
"""

import logging
import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from src.db.models import Base

logger = logging.getLogger(__name__)


# Configuration
def get_database_url() -> str:
    """Get database URL from environment or use default SQLite.

    Precedence:
    1. DATABASE_URL (canonical)
    2. BIZADVISOR_DB_PATH (converted to sqlite URL)
    3. sqlite:///<user data dir>/bizadvisor.db
    """
    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url:
        return database_url

    db_path = os.environ.get("BIZADVISOR_DB_PATH", "").strip()
    if db_path:
        if db_path.startswith("sqlite:"):
            return db_path
        return f"sqlite:///{db_path}"

    from src.utils.paths import ensure_dirs_exist, get_default_db_path

    ensure_dirs_exist()
    return f"sqlite:///{get_default_db_path()}"


# Engine creation
DATABASE_URL = get_database_url()

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False}
    if DATABASE_URL.startswith("sqlite")
    else {},
    echo=os.environ.get("SQL_ECHO", "").lower() == "true",
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
    """Configure SQLite pragmas for correctness and concurrency.

    Enables:
    - foreign_keys=ON: Referential integrity (disabled by default in SQLite).
    - journal_mode=WAL: Concurrent readers with a single writer, so chat
      turns and listing requests do not block each other.
    - synchronous=NORMAL: Commits are durable after WAL fsync.
    """
    if DATABASE_URL.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for synchronous operations.

    Intended for use with FastAPI's Depends() for request-scoped sessions.

    Usage:
        @router.get("/conversations/user/{user_id}")
        def list_conversations(db: Session = Depends(get_db)):
            return ConversationService(db).list_conversations(user_id)

    Yields:
        Session: SQLAlchemy session that will be closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Initialization functions


def _ensure_columns_exist(conn: Any) -> None:
    """Add newer profile columns to an existing accounts table (SQLite only).

    Uses PRAGMA table_info to introspect columns and ALTER TABLE to add
    missing ones. Idempotent, safe to call on every startup.

    Args:
        conn: SQLAlchemy Connection.

    Raises:
        OperationalError: For non-duplicate-column DDL failures.
    """
    if conn.dialect.name != "sqlite":
        return

    accounts_exists = conn.execute(
        text(
            "SELECT 1 FROM sqlite_master WHERE type='table' AND name='accounts' LIMIT 1"
        )
    ).fetchone()
    if not accounts_exists:
        return

    result = conn.execute(text("PRAGMA table_info(accounts)"))
    existing = {row[1] for row in result.fetchall()}

    migrations: list[tuple[str, str]] = [
        ("full_name", "ALTER TABLE accounts ADD COLUMN full_name VARCHAR(255)"),
        ("nickname", "ALTER TABLE accounts ADD COLUMN nickname VARCHAR(100)"),
        ("phone", "ALTER TABLE accounts ADD COLUMN phone VARCHAR(50)"),
        ("country", "ALTER TABLE accounts ADD COLUMN country VARCHAR(100)"),
        ("gender", "ALTER TABLE accounts ADD COLUMN gender VARCHAR(20)"),
        (
            "telegram_username",
            "ALTER TABLE accounts ADD COLUMN telegram_username VARCHAR(100)",
        ),
        # Base context layer
        ("user_role", "ALTER TABLE accounts ADD COLUMN user_role VARCHAR(50)"),
        (
            "business_stage",
            "ALTER TABLE accounts ADD COLUMN business_stage VARCHAR(50)",
        ),
        (
            "business_niche",
            "ALTER TABLE accounts ADD COLUMN business_niche VARCHAR(255)",
        ),
        ("region", "ALTER TABLE accounts ADD COLUMN region VARCHAR(100)"),
    ]

    for col_name, ddl in migrations:
        if col_name not in existing:
            try:
                conn.execute(text(ddl))
            except OperationalError as e:
                if "duplicate column" in str(e).lower():
                    logger.debug("Column %s already exists (concurrent add).", col_name)
                else:
                    logger.error("Failed to add column %s: %s", col_name, e)
                    raise

    try:
        conn.execute(
            text(
                "CREATE INDEX IF NOT EXISTS ix_accounts_telegram_username "
                "ON accounts (telegram_username)"
            )
        )
    except OperationalError as e:
        logger.warning("accounts index creation failed: %s", e)


def init_db() -> None:
    """Create all database tables synchronously.

    Safe to call multiple times - will not recreate existing tables.
    Runs column migration for new columns on existing tables.
    """
    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        _ensure_columns_exist(conn)


def close_db() -> None:
    """Close the sync engine and dispose of connection pool."""
    engine.dispose()
