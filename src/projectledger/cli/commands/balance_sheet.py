"""Balance sheet report command."""

import json
from decimal import Decimal

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_date_or_exit
from projectledger.cli.services import balance_sheet_service
from projectledger.domain.balance_sheet import COMPARED_TOTALS, SUMMARY_KEYS
from projectledger.domain.entities import BalanceSheet, GroupedBalances
from projectledger.domain.errors import DomainError

WIDTH = 72


def _amount_line(label: str, amount: Decimal, indent: int = 0) -> str:
    text = " " * indent + label
    return f"{text:<{WIDTH - 20}s}{amount:>20,.2f}"


def _display_groups(title: str, groups: GroupedBalances) -> None:
    if not groups:
        return
    click.echo(f"  {title}")
    for category, subgroups in groups.items():
        click.echo(f"    {category}")
        for subcategory, lines in subgroups.items():
            click.echo(f"      {subcategory}")
            for line in lines:
                click.echo(_amount_line(f"{line.code} {line.name}", line.balance, indent=8))


def _display_sheet(sheet: BalanceSheet) -> None:
    summary = sheet.summary
    click.echo(f"\nBalance sheet as of {sheet.as_of.isoformat()}")
    click.echo("=" * WIDTH)

    click.echo("ASSETS")
    _display_groups("Current assets", sheet.current_assets)
    for item in sheet.wip_items:
        click.echo(_amount_line(f"WIP {item.project_code} {item.name}", item.wip, indent=8))
    _display_groups("Non-current assets", sheet.non_current_assets)
    for asset in sheet.fixed_assets:
        click.echo(_amount_line(f"Fixed asset: {asset.name}", asset.book_value, indent=8))
    click.echo(_amount_line("Total assets", summary.total_assets))

    click.echo("-" * WIDTH)
    click.echo("LIABILITIES")
    _display_groups("Current liabilities", sheet.current_liabilities)
    _display_groups("Non-current liabilities", sheet.non_current_liabilities)
    click.echo(_amount_line("Total liabilities", summary.total_liabilities))

    click.echo("-" * WIDTH)
    click.echo("EQUITY")
    _display_groups("Equity", sheet.equity)
    click.echo(_amount_line("Net income", summary.net_income, indent=4))
    click.echo(_amount_line("Total equity incl. net income", summary.total_equity_with_income))

    click.echo("=" * WIDTH)
    click.echo(_amount_line("Total liabilities and equity", summary.total_liabilities_and_equity))
    click.echo(_amount_line("Difference", summary.difference))
    if summary.is_balanced:
        click.echo("Balanced.")
    else:
        click.echo(
            "NOT BALANCED: check for postings against missing accounts, WIP on "
            "ongoing projects that is not posted, and fixed assets without "
            "matching equity or liabilities.",
            err=True,
        )


@click.command("balance-sheet")
@click.option("--date", "report_date", default="today", show_default=True, help="Report date")
@click.option("--compare", "previous_date", help="Compare against this earlier date")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def balance_sheet_report(ctx, report_date: str, previous_date: str | None, as_json: bool):
    """Show the balance sheet.

    Examples:
        projectledger balance-sheet
        projectledger balance-sheet --date "end of last month" --compare "end of last year"
        projectledger balance-sheet --date 2024-12-31 --json
    """
    service = balance_sheet_service(ctx)
    current = parse_date_or_exit(ctx, report_date, "report date")
    previous = parse_date_or_exit(ctx, previous_date, "comparison date")

    try:
        if as_json:
            if previous is None:
                payload = service.generate_balance_sheet(current)
            else:
                payload = service.generate_comparative_balance_sheet(current, previous)
            click.echo(json.dumps(payload, indent=2, default=str))
            return

        if previous is None:
            _display_sheet(service.assemble(current))
            return

        comparison = service.comparative(current, previous)
    except DomainError as e:
        handle_domain_error(ctx, e)

    _display_sheet(comparison.current)
    click.echo(f"\nChanges since {previous.isoformat()}:")
    for field_name in COMPARED_TOTALS:
        click.echo(
            f"  {SUMMARY_KEYS[field_name]:24s} {comparison.changes[field_name]:>20,.2f} "
            f"({comparison.percent_changes[field_name]}%)"
        )


def register_commands(cli):
    """Register balance-sheet command with main CLI."""
    cli.add_command(balance_sheet_report)
