"""Database initialization and utilities."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

DEFAULT_DB_URL = "sqlite:///roster.db"
MEMORY_DB_URLS = {"sqlite://", "sqlite:///:memory:"}


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False) -> Engine:
    """
    Create SQLAlchemy engine.

    SQLite connections may be used from the notifier thread, so the
    same-thread check is disabled. In-memory databases share one
    connection, otherwise every new connection would see an empty database.
    """
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, echo=echo)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if db_url in MEMORY_DB_URLS:
        kwargs["poolclass"] = StaticPool
    return create_engine(db_url, echo=echo, **kwargs)


def init_database(db_url: str = DEFAULT_DB_URL) -> Engine:
    """Initialize database and create all tables."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    print(f"[INFO] Database initialized: {db_url}")
    return engine


def get_session_factory(db_url: str = DEFAULT_DB_URL) -> sessionmaker:
    """Get a session factory for the database, creating tables if needed."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


def get_session(db_url: str = DEFAULT_DB_URL) -> Session:
    """Get a new database session."""
    SessionFactory = get_session_factory(db_url)
    return SessionFactory()


def reset_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Drop all tables and recreate (WARNING: deletes all data!)."""
    engine = create_db_engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print(f"[WARN] Database reset: {db_url}")
