"""SQLModel engine and session management.

This module provides:
- Database engine creation with connection pooling and call timeouts
- Session context manager for store operations
- Database initialization utilities

PostgreSQL is the primary database. SQLite is used for tests.
"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from studio.config import DATABASE_URL, STORE_TIMEOUT_SECONDS


def build_engine(
    database_url: str = DATABASE_URL,
    timeout_seconds: float = STORE_TIMEOUT_SECONDS,
    **kwargs,
) -> Engine:
    """Create an engine whose calls fail after `timeout_seconds`.

    PostgreSQL gets a connect timeout and a server-side statement_timeout;
    SQLite gets its busy timeout.
    """
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout_seconds}
        return create_engine(database_url, connect_args=connect_args, **kwargs)

    timeout_ms = int(timeout_seconds * 1000)
    connect_args = {
        "connect_timeout": max(1, int(timeout_seconds)),
        "options": f"-c statement_timeout={timeout_ms}",
    }
    # pool_pre_ping ensures connections are valid before use
    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=timeout_seconds,
        connect_args=connect_args,
        **kwargs,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the process-wide engine for DATABASE_URL."""
    return build_engine()


@contextmanager
def get_session(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """Get a database session.

    Usage:
        with get_session() as session:
            post = session.get(Post, post_id)

    Yields:
        SQLModel Session instance
    """
    with Session(engine or get_engine()) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise


def init_db(engine: Optional[Engine] = None) -> None:
    """Initialize database tables.

    Creates all tables defined in SQLModel models.
    Should only be used for development/testing.
    Use Alembic migrations for production.
    """
    # Import all models to ensure they're registered with SQLModel
    from studio.db.models import (  # noqa: F401
        Profile,
        Workspace,
        WorkspaceMembership,
        SocialAccount,
        Post,
        Comment,
        AuditLog,
    )

    SQLModel.metadata.create_all(engine or get_engine())


def drop_all_tables(engine: Optional[Engine] = None) -> None:
    """Drop all tables. USE WITH CAUTION - data loss will occur."""
    SQLModel.metadata.drop_all(engine or get_engine())
