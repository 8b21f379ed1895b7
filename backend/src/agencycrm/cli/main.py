"""AgencyCRM CLI entry point."""

import click

from agencycrm.config import Settings
from agencycrm.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override AGENCYCRM_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """AgencyCRM — multi-tenant CRM backend CLI."""
    settings = Settings.from_env()
    configure_logging(log_level or settings.log_level)
    ctx.obj = settings


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
@click.pass_obj
def serve(settings: Settings, host: str, port: int, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "agencycrm.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# Register subcommand groups
from agencycrm.cli.admin_cmd import create_saas_admin, tokens  # noqa: E402
from agencycrm.cli.db_cmd import db  # noqa: E402

cli.add_command(db)
cli.add_command(tokens)
cli.add_command(create_saas_admin)
