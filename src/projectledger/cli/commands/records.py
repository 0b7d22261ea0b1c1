"""Cost and billing commands.

Both groups share their status, delete and history commands; only 'add'
differs (costs carry a category).
"""

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_amount_or_exit, parse_date_or_exit, resolve_project_or_exit
from projectledger.cli.services import check_posting_accounts, project_service
from projectledger.domain.chart import DEFAULT_COST_CATEGORY_ACCOUNTS
from projectledger.domain.entities import EntityKind, EntryStatus, PostingPair
from projectledger.domain.errors import DomainError

STATUS_CHOICES = [status.value for status in EntryStatus]
INITIAL_STATUS_CHOICES = [EntryStatus.PENDING.value, EntryStatus.UNPAID.value]


def _echo_result(result) -> None:
    if isinstance(result, PostingPair):
        click.echo(
            f"Posted DR {result.debit.account_code} / CR {result.credit.account_code} "
            f"{result.amount:,.2f} on {result.debit.date.isoformat()}"
        )
    elif isinstance(result, int):
        click.echo(f"Removed {result} postings")


@click.group()
def cost_group():
    """Manage project costs."""
    pass


@click.group()
def billing_group():
    """Manage client billings."""
    pass


@cost_group.command("add")
@click.option("--project", required=True, help="Project code or ID")
@click.option(
    "--category", required=True,
    type=click.Choice(sorted(DEFAULT_COST_CATEGORY_ACCOUNTS), case_sensitive=False),
    help="Cost category",
)
@click.option("--amount", required=True, help="Amount (e.g., 'Rp 1,000,000')")
@click.option("--date", "cost_date", default="today", show_default=True, help="Cost date")
@click.option("--description", help="Description")
@click.option(
    "--status", default=EntryStatus.PENDING.value, show_default=True,
    type=click.Choice(INITIAL_STATUS_CHOICES, case_sensitive=False),
)
@click.option("--no-journal", is_flag=True, help="Do not create journal entries for this cost")
@click.pass_context
def add_cost(
    ctx, project: str, category: str, amount: str, cost_date: str,
    description: str | None, status: str, no_journal: bool,
):
    """Record a project cost.

    Examples:
        projectledger cost add --project PRJ-001 --category material --amount 1000000
        projectledger cost add --project PRJ-001 --category labor --amount "Rp 250,000" --status unpaid
    """
    service = project_service(ctx)
    project_id = resolve_project_or_exit(ctx, service, project)
    value = parse_amount_or_exit(ctx, amount)
    on = parse_date_or_exit(ctx, cost_date)

    try:
        if status.lower() != EntryStatus.PENDING.value and not no_journal:
            check_posting_accounts(ctx)
        cost_id = service.add_cost(
            project_id=project_id, category=category, amount=value, cost_date=on,
            description=description, status=status, create_journal_entry=not no_journal,
        )
        click.echo(f"Created cost #{cost_id} ({status.lower()})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@billing_group.command("add")
@click.option("--project", required=True, help="Project code or ID")
@click.option("--amount", required=True, help="Amount (e.g., 'Rp 5,000,000')")
@click.option("--date", "billing_date", default="today", show_default=True, help="Billing date")
@click.option("--description", help="Description")
@click.option(
    "--status", default=EntryStatus.PENDING.value, show_default=True,
    type=click.Choice(INITIAL_STATUS_CHOICES, case_sensitive=False),
)
@click.option("--no-journal", is_flag=True, help="Do not create journal entries for this billing")
@click.pass_context
def add_billing(
    ctx, project: str, amount: str, billing_date: str,
    description: str | None, status: str, no_journal: bool,
):
    """Record a client billing.

    Examples:
        projectledger billing add --project PRJ-001 --amount 5000000 --status unpaid
    """
    service = project_service(ctx)
    project_id = resolve_project_or_exit(ctx, service, project)
    value = parse_amount_or_exit(ctx, amount)
    on = parse_date_or_exit(ctx, billing_date)

    try:
        if status.lower() != EntryStatus.PENDING.value and not no_journal:
            check_posting_accounts(ctx)
        billing_id = service.add_billing(
            project_id=project_id, amount=value, billing_date=on,
            description=description, status=status, create_journal_entry=not no_journal,
        )
        click.echo(f"Created billing #{billing_id} ({status.lower()})")
    except DomainError as e:
        handle_domain_error(ctx, e)


def _add_shared_commands(group: click.Group, kind: EntityKind) -> None:
    label = kind.value.lower()

    @group.command("status")
    @click.argument("entity_id", type=int)
    @click.argument("status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
    @click.option("--note", help="Note stored in the status history")
    @click.option("--actor", type=int, help="ID of the user making the change")
    @click.option("--payment-date", help="Payment date for 'paid' (defaults to today)")
    @click.option("--expected-version", type=int, help="Fail if the record changed since this version")
    @click.pass_context
    def change_status(
        ctx, entity_id: int, status: str, note: str | None, actor: int | None,
        payment_date: str | None, expected_version: int | None,
    ):
        """Change the status and write the matching postings."""
        service = project_service(ctx)
        paid_on = parse_date_or_exit(ctx, payment_date, "payment date")

        try:
            check_posting_accounts(ctx)
            result = service.change_status(
                kind, entity_id, status, actor_id=actor, note=note,
                payment_date=paid_on, expected_version=expected_version,
            )
            click.echo(f"{kind.value} #{entity_id} is now {status.lower()}")
            _echo_result(result)
        except DomainError as e:
            handle_domain_error(ctx, e)

    @group.command("delete")
    @click.argument("entity_id", type=int)
    @click.option("--yes", is_flag=True, help="Skip confirmation")
    @click.pass_context
    def delete_entity(ctx, entity_id: int, yes: bool):
        """Delete a record together with its postings."""
        service = project_service(ctx)

        if not yes and not click.confirm(f"Delete {label} #{entity_id} and its postings?"):
            click.echo("Deletion cancelled.")
            return

        try:
            removed = service.delete_entry(kind, entity_id)
            click.echo(f"Deleted {label} #{entity_id} ({removed} postings removed)")
        except DomainError as e:
            handle_domain_error(ctx, e)

    @group.command("history")
    @click.argument("entity_id", type=int)
    @click.pass_context
    def show_history(ctx, entity_id: int):
        """Show status history, newest first."""
        service = project_service(ctx)

        history = service.status_history(kind, entity_id)
        if not history:
            click.echo(f"No status history for {label} #{entity_id}.")
            return

        for row in history:
            actor = f" by {row.changed_by}" if row.changed_by is not None else ""
            note = f" - {row.notes}" if row.notes else ""
            click.echo(
                f"{row.changed_at:%Y-%m-%d %H:%M} | {row.old_status.value} -> {row.new_status.value}"
                f"{actor}{note}"
            )

    @group.command("list")
    @click.option("--project", help="Project code or ID")
    @click.pass_context
    def list_entities(ctx, project: str | None):
        """List records."""
        service = project_service(ctx)
        project_id = resolve_project_or_exit(ctx, service, project) if project else None

        if kind == EntityKind.COST:
            entries = service.list_costs(project_id=project_id)
        else:
            entries = service.list_billings(project_id=project_id)
        if not entries:
            click.echo(f"No {label} records found.")
            return

        for entry in entries:
            category = f" | {entry.category:16s}" if kind == EntityKind.COST else ""
            click.echo(
                f"#{entry.id:<4d} | project {entry.project_id:3d} | {entry.business_date.isoformat()}"
                f"{category} | {entry.status.value:8s} | {entry.amount:,.2f} | v{entry.version}"
            )


_add_shared_commands(cost_group, EntityKind.COST)
_add_shared_commands(billing_group, EntityKind.BILLING)


def register_commands(cli):
    """Register cost and billing commands with main CLI."""
    cli.add_command(cost_group, name="cost")
    cli.add_command(billing_group, name="billing")
