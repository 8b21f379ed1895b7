"""Tests for the Alembic migration runner against the shipped migrations."""

import shutil
import sqlite3
from pathlib import Path

import pytest

from agencycrm.migrations.runner import MigrationRunner
from agencycrm.persistence.schema import metadata

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


@pytest.fixture
def migrations_dir(tmp_path):
    """Copy of the shipped migrations in a scratch directory."""
    d = tmp_path / "migrations"
    shutil.copytree(MIGRATIONS_DIR, d, ignore=shutil.ignore_patterns("__pycache__"))
    return d


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def runner(migrations_dir, db_path):
    return MigrationRunner(f"sqlite:///{db_path}", migrations_dir)


def _tables(db_path: Path) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    finally:
        conn.close()
    return {r[0] for r in rows}


class TestUpgrade:
    def test_creates_every_table(self, runner, db_path):
        runner.upgrade()

        assert set(metadata.tables) <= _tables(db_path)
        assert "alembic_version" in _tables(db_path)

    def test_partial_upgrade_stops_at_target(self, runner, db_path):
        runner.upgrade("0001")

        tables = _tables(db_path)
        assert "contacts" in tables
        assert "deals" not in tables
        assert runner.current_heads() == ("0001",)

    def test_does_not_write_scaffolding(self, runner, migrations_dir):
        before = sorted(p.name for p in migrations_dir.iterdir())
        runner.upgrade()
        after = sorted(p.name for p in migrations_dir.iterdir() if p.name != "__pycache__")
        assert after == before

    def test_missing_env_raises(self, tmp_path, db_path):
        bare = tmp_path / "bare"
        (bare / "versions").mkdir(parents=True)

        with pytest.raises(FileNotFoundError):
            MigrationRunner(f"sqlite:///{db_path}", bare).upgrade()


class TestDowngrade:
    def test_one_step_drops_latest_tables(self, runner, db_path):
        runner.upgrade()
        runner.downgrade()

        tables = _tables(db_path)
        assert "deals" not in tables
        assert "tasks" not in tables
        assert "users" in tables

    def test_to_base_drops_everything(self, runner, db_path):
        runner.upgrade()
        runner.downgrade("base")

        assert not set(metadata.tables) & _tables(db_path)


class TestStatus:
    def test_fresh_database_has_no_heads(self, runner):
        assert runner.current_heads() == ()

    def test_pending_before_upgrade(self, runner):
        infos = runner.status()

        assert [i.revision for i in infos] == ["0001", "0002"]
        assert not any(i.is_applied for i in infos)
        assert infos[0].description == "initial schema"

    def test_applied_after_partial_upgrade(self, runner):
        runner.upgrade("0001")
        assert [i.is_applied for i in runner.status()] == [True, False]

    def test_stamp_marks_applied_without_running(self, runner, db_path):
        runner.stamp()

        assert all(i.is_applied for i in runner.status())
        assert "users" not in _tables(db_path)

    def test_has_revisions(self, runner, tmp_path):
        assert runner.has_revisions()
        assert not MigrationRunner("sqlite://", tmp_path / "nowhere").has_revisions()
