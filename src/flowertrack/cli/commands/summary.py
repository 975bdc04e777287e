"""Summary commands."""

import click
from flowertrack.domain.entities import DateRange, TimeWindow
from flowertrack.domain.errors import DomainError
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.shop import ShopService
from flowertrack.domain.summary import SummaryService
from flowertrack.cli.date_filters import (
    period_flags_from,
    period_options,
    resolve_cli_date_range,
)
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.cli.shop_resolution import get_store, resolve_shop_or_exit


@click.command("summary")
@period_options
@click.option(
    "--window",
    type=click.Choice([TimeWindow.DAY.value, TimeWindow.WEEK.value, TimeWindow.MONTH.value]),
    default=TimeWindow.DAY.value,
    show_default=True,
    help="Trailing window (ignored when dates are given)",
)
@click.option("--shop", help="Shop name or ID")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_week: bool,
    last_month: bool,
    last_week: bool,
    window: str,
    shop: str | None,
):
    """Show sales totals for a window or date range."""
    store = get_store(ctx)
    summary_service = SummaryService(store)
    shop_service = ShopService(store)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, this_week, last_month, last_week),
    )
    shop_id = resolve_shop_or_exit(ctx, shop_service, shop) if shop else None

    if start is not None or end is not None:
        period = DateRange(start, end)
        heading = f"{start or 'beginning'} to {end or 'today'}"
    else:
        period = TimeWindow(window)
        heading = f"last {window}"

    try:
        result = summary_service.period_summary(period, shop_id=shop_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if shop_id is not None:
        heading += f" - {shop_service.require_shop(shop_id).name}"
    click.echo(f"\nSummary ({heading})")
    click.echo("-" * 40)
    click.echo(f"{'Flowers sold':<20} {result.total_sold:>18}")
    click.echo(f"{'Flowers replaced':<20} {result.total_replaced:>18}")
    click.echo(f"{'Total amount':<20} {'₹' + format(result.total_amount, ',.2f'):>18}")
    click.echo(f"{'Cash received':<20} {'₹' + format(result.total_received, ',.2f'):>18}")
    click.echo(f"{'Balance':<20} {'₹' + format(result.balance, ',.2f'):>18}")
    click.echo(f"{'Average price':<20} {'₹' + format(result.average_price, ',.2f'):>18}")


@click.command("outstanding")
@click.pass_context
def outstanding(ctx):
    """List shops that owe money, largest balance first."""
    store = get_store(ctx)
    ledger = LedgerService(store)

    owing = ledger.shops_with_outstanding()
    if not owing:
        click.echo("No outstanding balances.")
        return

    click.echo("\nOutstanding balances:")
    click.echo("-" * 60)
    for shop, balance in owing:
        click.echo(f"{shop.name:<30} {shop.phone:<14} ₹{balance:>12,.2f}")
    click.echo("-" * 60)
    click.echo(f"{'TOTAL':<45} ₹{ledger.total_outstanding():>12,.2f}")


@click.command("trend")
@click.argument("shop", metavar="SHOP")
@click.option(
    "--window",
    type=click.Choice([w.value for w in TimeWindow]),
    default=TimeWindow.MONTH.value,
    show_default=True,
    help="Trailing window ending now",
)
@click.pass_context
def trend(ctx, shop: str, window: str):
    """Show a shop's deliveries with a running total of flowers."""
    store = get_store(ctx)
    summary_service = SummaryService(store)
    shop_id = resolve_shop_or_exit(ctx, ShopService(store), shop)

    try:
        points = summary_service.delivery_trend(shop_id, window)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not points:
        click.echo("No deliveries in this window.")
        return

    click.echo(f"{'Date':<12} {'Sold':>8} {'Cumulative':>12} {'Amount':>14}")
    click.echo("-" * 50)
    for point in points:
        click.echo(
            f"{point.date:%Y-%m-%d}   {point.flowers_sold:>8} {point.cumulative_quantity:>12} "
            f"{'₹' + format(point.amount, ',.2f'):>14}"
        )


def register_commands(cli: click.Group) -> None:
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(outstanding)
    cli.add_command(trend)
