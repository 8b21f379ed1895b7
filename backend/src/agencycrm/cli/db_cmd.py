"""Database CLI commands: init, upgrade, downgrade, status."""

from pathlib import Path

import click

from agencycrm.api.container import Services
from agencycrm.config import Settings, resolve_base_path
from agencycrm.migrations.runner import MigrationRunner

migrations_dir_option = click.option(
    "--migrations-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Migrations directory (default: <repo>/migrations).",
)


def _runner(settings: Settings, migrations_dir: Path | None) -> MigrationRunner:
    return MigrationRunner(
        settings.database.sqlalchemy_url,
        migrations_dir or resolve_base_path() / "migrations",
    )


def _ensure_sqlite_parent(settings: Settings) -> None:
    config = settings.database
    if config.is_sqlite and not config.is_memory:
        Path(config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
@migrations_dir_option
@click.pass_obj
def init(settings: Settings, migrations_dir: Path | None):
    """Create all tables, seed the module catalogue and stamp the head revision.

    Use this once on an empty database. Afterwards 'db upgrade' applies
    only migrations newer than the stamp.
    """
    services = Services.build(settings)
    try:
        services.db.create_all()
        created = services.modules.seed_defaults()
        services.roles.admin_role()
    finally:
        services.close()

    click.echo(f"Tables created on: {settings.database.url}")
    click.echo(f"Seeded {created} module(s).")

    try:
        _runner(settings, migrations_dir).stamp()
    except Exception as e:
        click.echo(f"Error stamping: {e}", err=True)
        raise SystemExit(1)
    click.echo("Database stamped at head.")


@db.command()
@click.option("--to", "target", default=None, help="Apply up to a specific revision.")
@migrations_dir_option
@click.pass_obj
def upgrade(settings: Settings, target: str | None, migrations_dir: Path | None):
    """Apply pending migrations."""
    runner = _runner(settings, migrations_dir)
    if not runner.has_revisions():
        click.echo("No migrations found.")
        return

    _ensure_sqlite_parent(settings)
    click.echo(f"Applying migrations to: {settings.database.url}")

    try:
        runner.upgrade(target or "head")
        click.echo("Migrations applied successfully.")
    except Exception as e:
        click.echo(f"Error applying migrations: {e}", err=True)
        raise SystemExit(1)

    _print_status(runner)


@db.command()
@click.option("--to", "target", default="-1", show_default=True, help="Target revision.")
@migrations_dir_option
@click.pass_obj
def downgrade(settings: Settings, target: str, migrations_dir: Path | None):
    """Roll back migrations (default: the last one)."""
    runner = _runner(settings, migrations_dir)
    click.echo(f"Rolling back to {target} on: {settings.database.url}")

    try:
        runner.downgrade(target)
        click.echo("Rollback successful.")
    except Exception as e:
        click.echo(f"Error rolling back: {e}", err=True)
        raise SystemExit(1)

    _print_status(runner)


@db.command()
@migrations_dir_option
@click.pass_obj
def status(settings: Settings, migrations_dir: Path | None):
    """Show migration status (applied and pending)."""
    runner = _runner(settings, migrations_dir)
    if not runner.has_revisions():
        click.echo("No migrations found.")
        return

    _print_status(runner)


def _print_status(runner: MigrationRunner) -> None:
    try:
        infos = runner.status()
    except Exception as e:
        click.echo(f"Could not read migration status: {e}", err=True)
        return

    if not infos:
        click.echo("No migrations found.")
        return

    applied_count = sum(1 for i in infos if i.is_applied)
    pending_count = len(infos) - applied_count

    click.echo(f"\nMigration status ({applied_count} applied, {pending_count} pending):")
    for info in infos:
        marker = "[x]" if info.is_applied else "[ ]"
        click.echo(f"  {marker} {info.revision}: {info.description}")
