"""Database infrastructure for SQLModel + PostgreSQL.

Usage:
    from studio.db import get_session

    with get_session() as session:
        post = session.get(Post, post_id)
"""

from studio.db.engine import build_engine, get_engine, get_session, init_db

__all__ = [
    "build_engine",
    "get_engine",
    "get_session",
    "init_db",
]
