"""Engine ownership and connection helpers.

Stores share one ``Database``. Every store method accepts an optional
``conn`` so that several writes can join a single transaction opened
with ``Database.begin()``; without one, the store opens its own
short-lived transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from agencycrm.persistence.config import DatabaseConfig
from agencycrm.persistence.schema import metadata

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Database:
    """Owns the SQLAlchemy engine. Dialect-neutral (SQLite and PostgreSQL)."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._engine = self._create_engine(config)

    @staticmethod
    def _create_engine(config: DatabaseConfig) -> Engine:
        if config.is_memory:
            engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            # Ensure parent directory exists for SQLite databases
            if config.is_sqlite:
                Path(config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)
            connect_args = {"check_same_thread": False} if config.is_sqlite else {}
            engine = create_engine(
                config.sqlalchemy_url, pool_pre_ping=True, connect_args=connect_args
            )

        if config.is_sqlite:

            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_conn, _record):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        return engine

    def create_all(self) -> None:
        """Create any missing tables."""
        metadata.create_all(self._engine)

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Borrow a connection for reads."""
        with self._engine.connect() as conn:
            yield conn

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Open a transaction; commits on success, rolls back on error."""
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def transaction(self, conn: Connection | None = None) -> Iterator[Connection]:
        """Join ``conn`` if given, otherwise open a new transaction."""
        if conn is not None:
            yield conn
            return
        with self.begin() as own:
            yield own

    def ping(self) -> bool:
        try:
            with self.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("Database ping failed")
            return False

    def close(self) -> None:
        self._engine.dispose()
