"""Initialize the default chart of accounts."""

import click
from projectledger.domain.account import AccountService
from projectledger.domain.chart import DEFAULT_CHART_OF_ACCOUNTS


@click.command("init-accounts")
@click.pass_context
def init_accounts(ctx):
    """Seed the default construction chart of accounts.

    Existing accounts are left untouched, so running this again only adds
    codes that are missing.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    created = service.seed_default_chart()
    if created == 0:
        click.echo("Chart of accounts already initialized.")
        return
    click.echo(f"Created {created} of {len(DEFAULT_CHART_OF_ACCOUNTS)} default accounts.")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
