"""Main CLI entry point."""

import click
from projectledger.config import DB_PATH_ENV, LOG_LEVEL_ENV, LedgerConfig
from projectledger.database.factories import create_sqlite_database
from projectledger.domain.chart import PostingMap
from projectledger.domain.events import EventBus, PostingsChanged
from projectledger.domain.wip import WipService
from projectledger.logging_config import configure_logging

# Import and register all commands at module level
from projectledger.cli.commands import (
    account,
    asset,
    balance_sheet,
    init_accounts,
    journal,
    project,
    records,
    wip,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help=f"Logging level (overrides {LOG_LEVEL_ENV} environment variable)",
    envvar=LOG_LEVEL_ENV,
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Projectledger - construction project accounting.

    Records project costs and client billings, turns their status changes
    into double-entry postings, and reports WIP and the balance sheet.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(log_level)

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        events = EventBus()
        events.subscribe(PostingsChanged, WipService(db).handle_postings_changed)

        ctx.obj["db"] = db
        ctx.obj["config"] = LedgerConfig.from_env()
        ctx.obj["posting_map"] = PostingMap()
        ctx.obj["events"] = events


# Register all commands
init_accounts.register_commands(cli)
account.register_commands(cli)
project.register_commands(cli)
records.register_commands(cli)
asset.register_commands(cli)
journal.register_commands(cli)
wip.register_commands(cli)
balance_sheet.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
