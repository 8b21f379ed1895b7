"""Application settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from agencycrm.persistence.config import DatabaseConfig

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


def resolve_base_path() -> Path:
    """Repository root: the parent of ``backend`` when run from there."""
    cwd = Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once and injected where needed.

    Attributes:
        secret_key: HMAC secret shared by every instance that verifies tokens
        database: Database connection configuration
        bcrypt_rounds: bcrypt work factor for new password hashes
        cors_origins: Origins allowed by the CORS middleware
        log_level: Root log level name
    """

    secret_key: str
    database: DatabaseConfig
    bcrypt_rounds: int = 10
    cors_origins: tuple[str, ...] = field(default=("http://localhost:5173",))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        base_path = base_path or resolve_base_path()

        secret_key = os.environ.get("AGENCYCRM_SECRET_KEY", "")
        if not secret_key:
            logger.warning(
                "AGENCYCRM_SECRET_KEY is not set; using the development secret"
            )
            secret_key = DEFAULT_SECRET_KEY

        origins = os.environ.get("AGENCYCRM_CORS_ORIGINS", "http://localhost:5173")

        return cls(
            secret_key=secret_key,
            database=DatabaseConfig.from_env(base_path),
            bcrypt_rounds=int(os.environ.get("AGENCYCRM_BCRYPT_ROUNDS", "10")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.environ.get("AGENCYCRM_LOG_LEVEL", "INFO").upper(),
        )
