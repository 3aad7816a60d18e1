"""
Database Module

This module handles database connections and provides session management.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from octopulse import config
from octopulse.models import Base

logger = logging.getLogger(__name__)

# Cache for database engines
_engines = {}


def get_engine(database_url=None):
    """
    Get or create a database engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL, defaults to config.DATABASE_URL

    Returns:
        Engine instance
    """
    database_url = database_url or config.DATABASE_URL
    if database_url not in _engines:
        kwargs = {}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url == "sqlite://":
                # one shared connection, otherwise each session sees an empty db
                kwargs["poolclass"] = StaticPool
        _engines[database_url] = create_engine(database_url, echo=False, **kwargs)
    return _engines[database_url]


def init_db(engine):
    """Create all tables on the given engine."""
    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn)
    logger.info(f"Database initialized at {engine.url}")


@contextmanager
def get_sync_session(engine):
    """
    Get a database session for the given engine.

    Args:
        engine: SQLAlchemy Engine instance

    Yields:
        Session instance
    """
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_session():
    # FastAPI dependency: one session per request
    with get_sync_session(get_engine()) as session:
        yield session
