"""Journal (posting) commands."""

from decimal import Decimal

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_date_or_exit
from projectledger.cli.services import journal_service
from projectledger.domain.entities import Direction, EntityKind
from projectledger.domain.errors import DomainError

KIND_CHOICES = [kind.value.lower() for kind in EntityKind]


@click.group()
def journal_group():
    """Inspect and maintain journal postings."""
    pass


@journal_group.command("list")
@click.option("--kind", type=click.Choice(KIND_CHOICES, case_sensitive=False), help="Cost or billing")
@click.option("--id", "entity_id", type=int, help="Cost or billing ID (requires --kind)")
@click.option("--account", help="Only postings against this account code")
@click.option("--as-of", help="Only postings dated on or before this date")
@click.pass_context
def list_postings(ctx, kind: str | None, entity_id: int | None, account: str | None, as_of: str | None):
    """List postings.

    Examples:
        projectledger journal list --kind cost --id 3
        projectledger journal list --account 1101 --as-of "end of last month"
    """
    if (kind is None) != (entity_id is None):
        click.echo("Error: --kind and --id must be given together", err=True)
        ctx.exit(1)

    service = journal_service(ctx)
    cutoff = parse_date_or_exit(ctx, as_of, "date")
    postings = service.list_postings(entity_kind=kind, entity_id=entity_id, as_of=cutoff, account_code=account)
    if not postings:
        click.echo("No postings found.")
        return

    debits = Decimal("0")
    credits = Decimal("0")
    for p in postings:
        if p.direction == Direction.DEBIT:
            debits += p.amount
            columns = f"{p.amount:>18,.2f} {'':>18s}"
        else:
            credits += p.amount
            columns = f"{'':>18s} {p.amount:>18,.2f}"
        click.echo(f"{p.date.isoformat()} | {p.account_code} | {columns} | {p.description}")
    click.echo("-" * 100)
    click.echo(f"{'Total':17s} | {debits:>18,.2f} {credits:>18,.2f}")


@journal_group.command("delete")
@click.argument("kind", type=click.Choice(KIND_CHOICES, case_sensitive=False))
@click.argument("entity_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_postings(ctx, kind: str, entity_id: int, yes: bool):
    """Delete every posting of a cost or billing, keeping the record."""
    service = journal_service(ctx)

    if not yes and not click.confirm(f"Delete all postings for {kind} #{entity_id}?"):
        click.echo("Deletion cancelled.")
        return

    result = service.delete_journal_entries(kind, entity_id)
    click.echo(f"Deleted {result['count']} postings")


@journal_group.command("verify")
@click.argument("kind", type=click.Choice(KIND_CHOICES, case_sensitive=False))
@click.argument("entity_id", type=int)
@click.pass_context
def verify(ctx, kind: str, entity_id: int):
    """Check that a record's postings balance; unbalanced legs are removed."""
    service = journal_service(ctx)

    try:
        checked = service.verify_pairing(kind, entity_id)
        click.echo(f"{checked} postings balanced")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
