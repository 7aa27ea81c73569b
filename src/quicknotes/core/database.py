"""
Database Configuration

SQLAlchemy 2.0 setup for the local SQLite key-value store.

Design:
    - Lazy initialization: engine created on first use, not at import.
    - get_session_factory: returns a reusable session maker.
    - init_db: creates tables (single table, no migration tooling).

The store is synchronous on purpose: every write happens inside the
single event loop's current step, so a blocking SQLite commit keeps
persistence atomic relative to note mutations.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from quicknotes.core.config import settings
from quicknotes.models.base import Base

logger = logging.getLogger(__name__)

# Module-level singletons (lazy)
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def create_session_factory(url: str) -> sessionmaker[Session]:
    """Build an engine for ``url``, create tables and return a session maker."""
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    # expire_on_commit=False: attributes stay readable after commit
    return sessionmaker(engine, expire_on_commit=False)


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine (singleton)."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = create_engine(settings.DATABASE_URL, echo=False)
        logger.info("Database engine created: %s", _engine.url)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory (singleton)."""
    global _session_factory  # noqa: PLW0603
    if _session_factory is None:
        _session_factory = sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


def init_db() -> None:
    """Create missing tables. Safe to call on every startup."""
    Base.metadata.create_all(get_engine())


def dispose_engine() -> None:
    """Dispose the engine at application shutdown."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database engine disposed")


__all__ = [
    "Base",
    "create_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "init_db",
]
