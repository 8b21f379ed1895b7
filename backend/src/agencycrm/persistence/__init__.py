"""Persistence layer - engine, schema and configuration."""

from agencycrm.persistence.config import DatabaseConfig
from agencycrm.persistence.database import Database

__all__ = ["Database", "DatabaseConfig"]
