"""Stock management commands."""

import click
from flowertrack.domain.entities import StockType
from flowertrack.domain.errors import DomainError
from flowertrack.domain.inventory import InventoryService
from flowertrack.cli.date_filters import (
    period_flags_from,
    period_options,
    resolve_cli_date_range,
)
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.cli.shop_resolution import get_store, persist
from flowertrack.utils.amount_parser import parse_quantity
from flowertrack.utils.date_parser import parse_timestamp

STOCK_LABELS = {
    StockType.GODOWN: "Total Stock in Godown",
    StockType.AVAILABLE: "Stock in Hand",
}


@click.group()
def stock_group():
    """Manage godown and available stock."""
    pass


@stock_group.command("add")
@click.argument("stock_type", type=click.Choice([t.value for t in StockType]))
@click.argument("quantity")
@click.option("--date", help="Movement date (YYYY-MM-DD, ISO timestamp or relative); defaults to now")
@click.pass_context
def add_stock(ctx, stock_type: str, quantity: str, date: str | None):
    """Add flowers to the godown, or move them from the godown into stock in hand.

    Examples:
        flowertrack stock add godown 500
        flowertrack stock add available 120 --date yesterday
    """
    store = get_store(ctx)
    service = InventoryService(store)

    try:
        count = parse_quantity(quantity)
    except ValueError as e:
        click.echo(f"Error: Invalid quantity: {e}", err=True)
        ctx.exit(1)

    movement_date = None
    if date is not None:
        try:
            movement_date = parse_timestamp(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        movement = service.add_stock(stock_type, count, date=movement_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    persist(ctx)
    click.echo(f"Added {movement.quantity} flowers to {STOCK_LABELS[movement.type]}")
    click.echo(f"  Stock in hand: {store.available_stock}")
    click.echo(f"  Godown: {store.godown_stock}")


@stock_group.command("show")
@click.pass_context
def show_stock(ctx):
    """Show the current stock counters."""
    store = get_store(ctx)
    click.echo(f"Stock in hand: {store.available_stock}")
    click.echo(f"Godown: {store.godown_stock}")


@stock_group.command("movements")
@period_options
@click.option(
    "--type",
    "stock_type",
    type=click.Choice([t.value for t in StockType]),
    help="Only movements into this pool",
)
@click.pass_context
def list_movements(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_week: bool,
    last_month: bool,
    last_week: bool,
    stock_type: str | None,
):
    """List stock movements with totals."""
    store = get_store(ctx)
    service = InventoryService(store)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, this_week, last_month, last_week),
    )

    movements = service.list_movements(start=start, end=end, stock_type=stock_type)
    if not movements:
        click.echo("No stock movements found.")
        return

    click.echo(f"\nFound {len(movements)} movement(s):")
    click.echo("-" * 60)
    click.echo(f"{'Date':<12} {'Type':<24} {'Quantity':>10}")
    click.echo("-" * 60)
    for m in movements:
        click.echo(f"{m.date:%Y-%m-%d}   {STOCK_LABELS[m.type]:<24} {m.quantity:>10}")

    totals = service.movement_totals(start=start, end=end)
    click.echo("-" * 60)
    click.echo(f"Total added to godown: {totals.added_to_godown}")
    click.echo(f"Total added to stock in hand: {totals.moved_to_available}")


@stock_group.command("reconcile")
@click.option("--repair", is_flag=True, help="Reset drifted counters to the values derived from the logs")
@click.pass_context
def reconcile_stock(ctx, repair: bool):
    """Check the stock counters against the movement and sales logs."""
    store = get_store(ctx)
    service = InventoryService(store)

    try:
        report = service.reconcile(repair=repair)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if report.in_balance:
        click.echo("Stock counters match the logs.")
        return

    click.echo(
        f"Stock in hand: {report.available_stock} (derived {report.derived_available})"
    )
    click.echo(f"Godown: {report.godown_stock} (derived {report.derived_godown})")
    if report.repaired:
        persist(ctx)
        click.echo("Counters reset to the derived values.")
    else:
        click.echo("Run with --repair to reset the counters.")
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register stock commands with main CLI."""
    cli.add_command(stock_group, name="stock")
