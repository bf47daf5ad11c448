"""
Database setup for the FastAPI backend.
Provides the SQLAlchemy engine/session service for SQLite or PostgreSQL.
"""
import logging
import random
import time
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from domain.errors import InternalError
from settings import Settings

logger = logging.getLogger(__name__)
Base = declarative_base()


def _build_engine(settings: Settings):
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        # check_same_thread=False allows usage across FastAPI threads;
        # timeout bounds how long a writer waits for the file lock
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False, "timeout": settings.DB_POOL_TIMEOUT},
        )
    return create_engine(
        settings.DATABASE_URL,
        pool_size=10,
        max_overflow=10,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


class Database:
    """Owns the engine and session factory for one process.

    Constructed once by the application factory and shared through
    ``app.state``; ``dispose()`` drains the pool on shutdown.
    """

    def __init__(self, settings: Settings, sleep: Callable[[float], None] = time.sleep):
        self.settings = settings
        self.engine = _build_engine(settings)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        self._sleep = sleep

    def session(self) -> Session:
        return self.SessionLocal()

    def retry_delay(self, attempt: int) -> float:
        """Exponential backoff with up to 25% jitter, capped at the configured ceiling."""
        base = min(
            self.settings.DB_INITIAL_RETRY_DELAY * (2 ** attempt),
            self.settings.DB_MAX_RETRY_DELAY,
        )
        return base + random.uniform(0, 0.25 * base)

    def _ensure_sqlite_dir(self) -> None:
        # Created on first use, not at construction
        url = make_url(self.settings.DATABASE_URL)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def connect(self) -> None:
        """Verify the backend is reachable, retrying with backoff."""
        self._ensure_sqlite_dir()
        max_attempts = max(1, self.settings.DB_MAX_RETRIES)
        last_error: Optional[Exception] = None
        for attempt in range(max_attempts):
            try:
                self.ping()
                logger.info("Database connection established (attempt %d/%d)", attempt + 1, max_attempts)
                return
            except SQLAlchemyError as exc:
                last_error = exc
                if attempt + 1 >= max_attempts:
                    break
                delay = self.retry_delay(attempt)
                logger.warning(
                    "Database connection attempt %d/%d failed: %s; retrying in %.2fs",
                    attempt + 1,
                    max_attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)
        logger.error("Giving up on database after %d attempts: %s", max_attempts, last_error)
        raise InternalError("Database unavailable") from last_error

    def init_schema(self) -> None:
        """Create tables if they don't exist."""
        from repositories import models  # noqa: F401  Ensures models are registered

        self._ensure_sqlite_dir()
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database pool disposed")
