"""
Storage for per-session dice configurations (SQLAlchemy over SQLite).

Request handlers get a session through the get_db dependency; other code
uses the get_db_session context manager. Both commit on success and roll
back on error.
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from backend.config import settings

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite:///"


def _ensure_sqlite_dir(url: str) -> None:
    """Create the parent directory of a file-based SQLite database."""
    if url.startswith(SQLITE_PREFIX) and ":memory:" not in url:
        Path(url[len(SQLITE_PREFIX):]).parent.mkdir(parents=True, exist_ok=True)


def _build_engine(url: str) -> Engine:
    _ensure_sqlite_dir(url)
    # One connection per unit of work; nothing is shared between threads
    return create_engine(
        url,
        poolclass=NullPool,
        connect_args={"check_same_thread": False, "timeout": settings.DB_TIMEOUT},
        echo=settings.DEBUG,
    )


engine = _build_engine(settings.DATABASE_URL)


@event.listens_for(engine, "connect")
def _configure_connection(dbapi_connection, connection_record):
    """WAL lets readers proceed while a write is in progress."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={settings.DB_TIMEOUT * 1000}")
    finally:
        cursor.close()


SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Unit of work: commit on success, roll back and re-raise on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency wrapping get_db_session."""
    with get_db_session() as db:
        yield db


def init_db() -> None:
    """Create missing tables (idempotent)."""
    from backend.models.database import DiceConfigRecord  # noqa: F401  registers the table

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready at {engine.url}")
