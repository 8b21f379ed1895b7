"""Database configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. AGENCYCRM_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/agencycrm.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("AGENCYCRM_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'agencycrm.db'}")

        return cls(url="sqlite:///agencycrm.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql") or self.url.startswith("postgres://")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and self.sqlite_path in ("", ":memory:")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a SQLite database ("" for in-memory)."""
        return self.url.replace("sqlite:///", "").replace("sqlite://", "")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver since
        the project depends on psycopg[binary], not psycopg2.
        """
        if self.url.startswith("postgres://"):
            return self.url.replace("postgres://", "postgresql+psycopg://", 1)
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url
