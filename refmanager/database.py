"""Database configuration and session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from refmanager.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def create_store_engine(database_url: str, busy_timeout: float = 30.0) -> Engine:
    """Create an engine for the reference store.

    SQLite has no row-level locking, so every transaction is opened with
    BEGIN IMMEDIATE: the first writer holds the database write lock and a
    second writer's BEGIN waits (up to ``busy_timeout`` seconds) until the
    first commits or rolls back.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": busy_timeout},
        )
        _serialize_sqlite_writers(engine)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def _serialize_sqlite_writers(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_store_engine(settings.database_url, settings.sqlite_busy_timeout)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Run a unit of work as one transaction.

    Commits when the block exits normally; on any exception (or early exit
    of the enclosing generator) the whole transaction is rolled back and the
    error propagates unchanged.
    """
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise


def init_db(bind: Engine | None = None) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from refmanager import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Reference store schema ready")
