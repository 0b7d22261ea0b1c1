"""Fixed asset commands."""

from datetime import date

import click
from projectledger.cli.error_handling import handle_domain_error
from projectledger.cli.inputs import parse_amount_or_exit, parse_date_or_exit
from projectledger.domain.errors import DomainError
from projectledger.domain.fixed_asset import FixedAssetService


@click.group()
def asset_group():
    """Manage fixed assets."""
    pass


@asset_group.command("add")
@click.argument("name")
@click.option("--value", required=True, help="Acquisition value")
@click.option("--date", "acquired", default="today", show_default=True, help="Acquisition date")
@click.option("--life", "useful_life", required=True, type=int, help="Useful life in years")
@click.option("--category", help="Asset category (e.g., 'Equipment', 'Vehicle')")
@click.pass_context
def add_asset(ctx, name: str, value: str, acquired: str, useful_life: int, category: str | None):
    """Register a fixed asset.

    Examples:
        projectledger asset add "Boring machine XY-200" --value 350000000 --life 8 --category Equipment
    """
    service = FixedAssetService(ctx.obj["db"])
    amount = parse_amount_or_exit(ctx, value, "value")
    on = parse_date_or_exit(ctx, acquired, "acquisition date")

    try:
        asset_id = service.create_fixed_asset(
            name=name, acquisition_date=on, value=amount,
            useful_life_years=useful_life, category=category,
        )
        click.echo(f"Registered asset '{name}' (ID: {asset_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@asset_group.command("list")
@click.pass_context
def list_assets(ctx):
    """List fixed assets with their book values."""
    service = FixedAssetService(ctx.obj["db"])

    assets = service.list_fixed_assets()
    if not assets:
        click.echo("No fixed assets found.")
        return

    click.echo("\nFixed assets:")
    click.echo("-" * 100)
    for a in assets:
        click.echo(
            f"ID: {a.id:3d} | {a.name:30s} | {a.acquisition_date.isoformat()} | "
            f"value {a.value:,.2f} | acc. dep. {a.accumulated_depreciation:,.2f} | "
            f"book {a.book_value:,.2f}"
        )


@asset_group.command("depreciate")
@click.argument("asset_id", type=int, required=False)
@click.option("--as-of", default="today", show_default=True, help="Depreciate up to this date")
@click.option("--dry-run", is_flag=True, help="Show the figures without storing them")
@click.pass_context
def depreciate(ctx, asset_id: int | None, as_of: str, dry_run: bool):
    """Recompute straight-line depreciation.

    Without ASSET_ID, every asset acquired by the date is updated.
    """
    service = FixedAssetService(ctx.obj["db"])
    on: date = parse_date_or_exit(ctx, as_of, "date")

    try:
        if asset_id is not None:
            if dry_run:
                results = {asset_id: service.depreciation_of(asset_id, on)}
            else:
                results = {asset_id: service.apply_depreciation(asset_id, on)}
        elif dry_run:
            results = {a.id: service.depreciation_of(a.id, on) for a in service.list_fixed_assets(as_of=on)}
        else:
            results = service.apply_depreciation_all(on)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not results:
        click.echo("No fixed assets to depreciate.")
        return

    for key, dep in results.items():
        state = " (fully depreciated)" if dep.is_fully_depreciated else ""
        click.echo(
            f"Asset {key}: {dep.days_elapsed} days, accumulated {dep.accumulated_depreciation:,.2f}, "
            f"book value {dep.book_value:,.2f}{state}"
        )
    if dry_run:
        click.echo("Dry run: nothing stored.")


@asset_group.command("schedule")
@click.argument("asset_id", type=int)
@click.pass_context
def schedule(ctx, asset_id: int):
    """Show the year-by-year depreciation schedule of an asset."""
    service = FixedAssetService(ctx.obj["db"])

    try:
        rows = service.depreciation_schedule(asset_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nDepreciation schedule for asset {asset_id}:")
    click.echo("-" * 100)
    for row in rows:
        click.echo(
            f"{row.year} | begin {row.beginning_value:>16,.2f} | "
            f"depreciation {row.depreciation:>16,.2f} ({row.percent_of_year:6.2f}%) | "
            f"accumulated {row.accumulated_depreciation:>16,.2f} | end {row.ending_value:>16,.2f}"
        )


def register_commands(cli):
    """Register fixed asset commands with main CLI."""
    cli.add_command(asset_group, name="asset")
