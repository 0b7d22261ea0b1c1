"""Chart-of-accounts commands."""

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.domain.account import AccountService
from projectledger.domain.entities import AccountClass
from projectledger.domain.errors import DomainError

CLASS_CHOICES = [account_class.value for account_class in AccountClass]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--class", "account_class", required=True,
    type=click.Choice(CLASS_CHOICES, case_sensitive=False), help="Account class",
)
@click.option("--category", help="Balance-sheet category label")
@click.option("--subcategory", help="Balance-sheet subcategory label")
@click.option("--non-current", is_flag=True, help="Mark an asset or liability as non-current")
@click.pass_context
def create_account(
    ctx, code: str, name: str, account_class: str, category: str | None,
    subcategory: str | None, non_current: bool,
):
    """Create a new account.

    Examples:
        projectledger account create 1106 "Bank Permata" --class asset --category "Cash & Bank"
        projectledger account create 2203 "Bonds Payable" --class liability --non-current
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    flags = {}
    if non_current:
        if account_class.lower() == AccountClass.LIABILITY.value:
            flags["is_current_liability"] = False
        else:
            flags["is_current_asset"] = False

    try:
        service.create_account(
            code=code, name=name, account_class=account_class,
            category=category, subcategory=subcategory, **flags,
        )
        click.echo(f"Created account {code} '{name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option(
    "--class", "account_class",
    type=click.Choice(CLASS_CHOICES, case_sensitive=False), help="Only accounts of this class",
)
@click.pass_context
def list_accounts(ctx, account_class: str | None):
    """List accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(account_class=account_class)
    if not accounts:
        click.echo("No accounts found. Run 'projectledger init-accounts' to seed the default chart.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        current = "current" if acc.is_current else "non-current"
        click.echo(
            f"{acc.code} | {acc.name:45s} | {acc.account_class.value:11s} | "
            f"{acc.category or '-'} ({current})"
        )


@account_group.command("delete")
@click.argument("code")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, code: str, yes: bool):
    """Delete an account that has no postings."""
    db = ctx.obj["db"]
    service = AccountService(db)

    account = service.get_account(code)
    if account is None:
        click.echo(f"Error: Account {code} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete account {code} '{account.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(code)
        click.echo(f"Deleted account {code} '{account.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
