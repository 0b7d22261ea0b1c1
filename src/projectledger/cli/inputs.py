"""CLI helpers for parsing dates, amounts and project references."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click

from projectledger.domain.project import ProjectService
from projectledger.utils.amount_parser import parse_amount
from projectledger.utils.date_parser import parse_date


def parse_date_or_exit(ctx: click.Context, value: str | None, label: str = "date") -> date | None:
    """Parse an optional CLI date, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse a CLI amount, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_project_or_exit(ctx: click.Context, service: ProjectService, project: str) -> int:
    """Resolve project code or ID, or exit with a CLI error."""
    try:
        return service.resolve_project(project)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
