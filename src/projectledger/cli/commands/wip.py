"""WIP report command."""

from datetime import date

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_date_or_exit, resolve_project_or_exit
from projectledger.cli.services import project_service
from projectledger.domain.errors import DomainError
from projectledger.domain.wip import WipService


def _show_history(ctx, service: WipService, project: str) -> None:
    project_id = resolve_project_or_exit(ctx, project_service(ctx), project)
    try:
        history = service.wip_history(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not history:
        click.echo(f"No WIP history for project {project}.")
        return

    click.echo(f"\nWIP history for project {project}:")
    click.echo("-" * 90)
    for snapshot in history:
        click.echo(
            f"{snapshot.as_of.isoformat()} | costs {snapshot.costs:>16,.2f} | "
            f"billed {snapshot.billed:>16,.2f} | WIP {snapshot.wip:>16,.2f} | "
            f"{snapshot.progress:6.2f}% complete"
        )


@click.command("wip")
@click.option("--date", "as_of", default="today", show_default=True, help="Report date")
@click.option("--history", "project", help="Show stored WIP snapshots for a project code or ID")
@click.pass_context
def wip_report(ctx, as_of: str, project: str | None):
    """Show work in progress for ongoing projects."""
    service = WipService(ctx.obj["db"])
    if project is not None:
        _show_history(ctx, service, project)
        return

    on: date = parse_date_or_exit(ctx, as_of, "date")
    valuation = service.valuate(on)

    if not valuation.projects:
        click.echo(f"No ongoing projects as of {on.isoformat()}.")
        return

    click.echo(f"\nWork in progress as of {on.isoformat()}:")
    click.echo("-" * 90)
    for item in valuation.projects:
        click.echo(
            f"{item.project_code:10s} | {item.name:30s} | costs {item.costs:>16,.2f} | "
            f"billed {item.billed:>16,.2f} | WIP {item.wip:>16,.2f}"
        )
    click.echo("-" * 90)
    click.echo(f"Total WIP (asset):                {valuation.total_wip:>16,.2f}")
    click.echo(f"Total negative WIP (liability):   {valuation.total_negative_wip:>16,.2f}")


def register_commands(cli):
    """Register wip command with main CLI."""
    cli.add_command(wip_report)
