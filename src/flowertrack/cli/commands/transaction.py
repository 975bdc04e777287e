"""Transaction management commands."""

import click
from flowertrack.domain.entities import DateRange, SortKey, TimeWindow, ValueRange
from flowertrack.domain.errors import DomainError
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.shop import ShopService
from flowertrack.domain.summary import SummaryService, transaction_summary
from flowertrack.cli.date_filters import (
    period_flags_from,
    period_options,
    resolve_cli_date_range,
)
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.cli.shop_resolution import get_store, persist, resolve_shop_or_exit
from flowertrack.utils.amount_parser import parse_amount
from flowertrack.utils.date_parser import parse_timestamp


def _parse_bound(ctx, label: str, value: str | None):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("edit")
@click.argument("transaction_id")
@click.option("--sold", help="Number of flowers sold")
@click.option("--rate", help="Price per flower")
@click.option("--cash", help="Cash received")
@click.option("--replaced", help="Defective flowers replaced free")
@click.option("--date", help="Sale date (YYYY-MM-DD, ISO timestamp or relative like 'yesterday')")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: str,
    sold: str | None,
    rate: str | None,
    cash: str | None,
    replaced: str | None,
    date: str | None,
) -> None:
    """Edit a transaction and recompute the shop's balances.

    Updates only the fields that are provided.

    Examples:
        flowertrack transaction edit 1718000000000 --cash 400
        flowertrack transaction edit 1718000000000 --date 2024-06-01
    """
    store = get_store(ctx)
    ledger = LedgerService(store)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_timestamp(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        txn = ledger.edit_transaction(
            transaction_id,
            flowers_sold=sold,
            rate=rate,
            cash_received=cash,
            replaced_flowers=replaced,
            date=txn_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    persist(ctx)
    click.echo(f"Updated transaction {transaction_id}")
    click.echo(f"  Outstanding after this sale: ₹{txn.outstanding_balance:,.2f}")
    click.echo(f"  Shop balance: ₹{ledger.balance_of(txn.shop_id):,.2f}")


@transaction_group.command("list")
@period_options
@click.option(
    "--window",
    type=click.Choice([w.value for w in TimeWindow]),
    help="Trailing window ending now (ignored when dates are given)",
)
@click.option("--on", "on_date", help="Only transactions on this day")
@click.option("--shop", help="Shop name or ID")
@click.option("--min-rate", help="Minimum rate")
@click.option("--max-rate", help="Maximum rate")
@click.option("--min-outstanding", help="Minimum outstanding balance")
@click.option("--max-outstanding", help="Maximum outstanding balance")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice([k.value for k in SortKey]),
    default=SortKey.DATE.value,
    show_default=True,
    help="Sort column",
)
@click.option("--desc", is_flag=True, help="Sort descending")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_week: bool,
    last_month: bool,
    last_week: bool,
    window: str | None,
    on_date: str | None,
    shop: str | None,
    min_rate: str | None,
    max_rate: str | None,
    min_outstanding: str | None,
    max_outstanding: str | None,
    sort_by: str,
    desc: bool,
):
    """View transactions with optional filters.

    Shop can be specified by name or ID.
    """
    store = get_store(ctx)
    shop_service = ShopService(store)
    summary_service = SummaryService(store)

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(this_month, this_week, last_month, last_week),
    )

    day = None
    if on_date is not None:
        try:
            day = parse_timestamp(on_date).date()
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    shop_id = resolve_shop_or_exit(ctx, shop_service, shop) if shop else None

    rate_range = None
    if min_rate is not None or max_rate is not None:
        rate_range = ValueRange(
            _parse_bound(ctx, "minimum rate", min_rate),
            _parse_bound(ctx, "maximum rate", max_rate),
        )
    outstanding_range = None
    if min_outstanding is not None or max_outstanding is not None:
        outstanding_range = ValueRange(
            _parse_bound(ctx, "minimum outstanding", min_outstanding),
            _parse_bound(ctx, "maximum outstanding", max_outstanding),
        )

    try:
        transactions = summary_service.filtered_transactions(
            date_range=DateRange(start, end),
            window=window,
            shop_id=shop_id,
            rate_range=rate_range,
            outstanding_range=outstanding_range,
            on_date=day,
            sort_by=sort_by,
            descending=desc,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    shops = {s.id: s.name for s in shop_service.list_shops()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<15} {'Date':<12} {'Shop':<22} {'Sold':>6} {'Repl':>5} {'Rate':>8} "
        f"{'Amount':>12} {'Cash':>12} {'Outstanding':>14}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        shop_name = shops.get(txn.shop_id, "Unknown")[:22]
        click.echo(
            f"{txn.id:<15} {txn.date:%Y-%m-%d}   {shop_name:<22} {txn.flowers_sold:>6} "
            f"{txn.replaced_flowers:>5} {txn.rate:>8,.2f} {txn.amount:>12,.2f} "
            f"{txn.cash_received:>12,.2f} {txn.outstanding_balance:>14,.2f}"
        )

    totals = transaction_summary(transactions)
    click.echo("-" * 110)
    click.echo(
        f"TOTAL  Flowers: {totals.total_flowers} | Amount: ₹{totals.total_amount:,.2f} | "
        f"Received: ₹{totals.total_received:,.2f} | Avg rate: ₹{totals.average_rate:,.2f} | "
        f"Outstanding: ₹{totals.total_outstanding:,.2f}"
    )


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
