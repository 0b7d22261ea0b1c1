"""Project commands."""

from datetime import date

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_amount_or_exit, parse_date_or_exit, resolve_project_or_exit
from projectledger.cli.services import project_service
from projectledger.domain.entities import ProjectStatus, RevenueLine
from projectledger.domain.errors import DomainError

STATUS_CHOICES = [status.value for status in ProjectStatus]


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--value", required=True, help="Total contract value (e.g., 'Rp 150,000,000')")
@click.option(
    "--revenue-line", required=True,
    type=click.Choice([line.value for line in RevenueLine], case_sensitive=False),
    help="Service line the project bills under",
)
@click.option("--start", "start_date", default="today", show_default=True, help="Start date")
@click.option("--end", "end_date", help="End date")
@click.option(
    "--status", default=ProjectStatus.ONGOING.value, show_default=True,
    type=click.Choice(STATUS_CHOICES, case_sensitive=False),
)
@click.pass_context
def create_project(
    ctx, code: str, name: str, value: str, revenue_line: str, start_date: str,
    end_date: str | None, status: str,
):
    """Create a project.

    Examples:
        projectledger project create PRJ-001 "Soil test Jl. Sudirman" --value 150000000 --revenue-line sondir
    """
    service = project_service(ctx)
    total_value = parse_amount_or_exit(ctx, value, "value")
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    try:
        project_id = service.create_project(
            project_code=code, name=name, total_value=total_value, start_date=start,
            revenue_line=revenue_line, status=status, end_date=end,
        )
        click.echo(f"Created project {code} '{name}' (ID: {project_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@project_group.command("list")
@click.option("--status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
@click.pass_context
def list_projects(ctx, status: str | None):
    """List projects."""
    service = project_service(ctx)

    projects = service.list_projects(status=status)
    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 90)
    for p in projects:
        click.echo(
            f"ID: {p.id:3d} | {p.project_code:10s} | {p.name:30s} | {p.status.value:9s} | "
            f"{p.revenue_line.value:12s} | {p.total_value:,.2f}"
        )


@project_group.command("status")
@click.argument("project")
@click.argument("status", type=click.Choice(STATUS_CHOICES, case_sensitive=False))
@click.option("--end", "end_date", help="End date (defaults to today when completing)")
@click.pass_context
def set_project_status(ctx, project: str, status: str, end_date: str | None):
    """Change a project's status. PROJECT is a project code or ID."""
    service = project_service(ctx)
    project_id = resolve_project_or_exit(ctx, service, project)
    end = parse_date_or_exit(ctx, end_date, "end date")
    if end is None and status.lower() == ProjectStatus.COMPLETED.value:
        end = date.today()

    try:
        service.update_project_status(project_id, status, end_date=end)
        click.echo(f"Project {project} is now {status.lower()}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
