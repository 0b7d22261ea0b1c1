"""CLI error handling helpers."""

import click

from projectledger.domain.errors import DomainError, PartialWriteError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, PartialWriteError):
        click.echo(f"Removed {error.removed} orphan postings.", err=True)
    ctx.exit(1)
