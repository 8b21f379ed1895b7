"""Drive Alembic against the committed ``migrations/`` tree.

``migrations/env.py`` and ``migrations/versions/`` ship with the
repository, so the runner only binds a database URL to that directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevisionState:
    revision: str
    description: str
    is_applied: bool


class MigrationRunner:
    """Upgrade, downgrade, stamp and report on one database."""

    def __init__(self, database_url: str, migrations_dir: Path):
        self.database_url = database_url
        self.migrations_dir = Path(migrations_dir)

    def has_revisions(self) -> bool:
        versions = self.migrations_dir / "versions"
        return versions.is_dir() and any(versions.glob("*.py"))

    def _config(self) -> Config:
        if not (self.migrations_dir / "env.py").is_file():
            raise FileNotFoundError(f"No Alembic env.py in {self.migrations_dir}")
        cfg = Config()
        # Config values go through ConfigParser interpolation.
        cfg.set_main_option("script_location", str(self.migrations_dir).replace("%", "%%"))
        cfg.set_main_option("sqlalchemy.url", self.database_url.replace("%", "%%"))
        return cfg

    def upgrade(self, target: str = "head") -> None:
        logger.info("Upgrading database to %s", target)
        command.upgrade(self._config(), target)

    def downgrade(self, target: str = "-1") -> None:
        logger.info("Downgrading database to %s", target)
        command.downgrade(self._config(), target)

    def stamp(self, revision: str = "head") -> None:
        """Record ``revision`` as applied without running it, e.g. after ``create_all()``."""
        logger.info("Stamping database at %s", revision)
        command.stamp(self._config(), revision)

    def current_heads(self) -> tuple[str, ...]:
        """Revisions recorded in the version table; empty on a fresh database."""
        engine = create_engine(self.database_url)
        try:
            with engine.connect() as conn:
                return MigrationContext.configure(conn).get_current_heads()
        finally:
            engine.dispose()

    def status(self) -> list[RevisionState]:
        """Every known revision, oldest first.

        A revision counts as applied when it is a recorded head or an
        ancestor of one.
        """
        script = ScriptDirectory.from_config(self._config())
        heads = self.current_heads()
        applied = (
            {rev.revision for rev in script.iterate_revisions(heads, "base")} if heads else set()
        )
        return [
            RevisionState(rev.revision, rev.doc or "", rev.revision in applied)
            for rev in reversed(list(script.walk_revisions()))
        ]
