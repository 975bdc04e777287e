"""Record sale command."""

import click
from flowertrack.domain.errors import DomainError
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.shop import ShopService
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.cli.shop_resolution import get_store, persist, resolve_shop_or_exit
from flowertrack.utils.date_parser import parse_timestamp


@click.command("sale")
@click.argument("shop", metavar="SHOP")
@click.option("--sold", required=True, help="Number of flowers sold")
@click.option(
    "--rate",
    help="Price per flower (defaults to the rate of the shop's last delivery)",
)
@click.option("--cash", required=True, help="Cash received")
@click.option("--replaced", default="0", show_default=True, help="Defective flowers replaced free")
@click.option(
    "--date",
    help="Sale date (YYYY-MM-DD, ISO timestamp or relative like 'yesterday'); defaults to now",
)
@click.pass_context
def record_sale(
    ctx,
    shop: str,
    sold: str,
    rate: str | None,
    cash: str,
    replaced: str,
    date: str | None,
):
    """Record a delivery to a shop.

    SHOP can be a shop name or ID.

    Examples:
        flowertrack sale "Lakshmi Stores" --sold 100 --rate 4.5 --cash 200
        flowertrack sale 1718000000000 --sold 50 --cash 0 --replaced 2 --date yesterday
    """
    store = get_store(ctx)
    ledger = LedgerService(store)
    shop_service = ShopService(store)
    shop_id = resolve_shop_or_exit(ctx, shop_service, shop)

    if rate is None:
        last_rate = ledger.last_sale_rate(shop_id)
        if last_rate is None:
            click.echo("Error: --rate is required for a shop's first sale", err=True)
            ctx.exit(1)
        rate = str(last_rate)

    sale_date = None
    if date is not None:
        try:
            sale_date = parse_timestamp(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        txn = ledger.record_sale(
            shop_id=shop_id,
            flowers_sold=sold,
            rate=rate,
            cash_received=cash,
            replaced_flowers=replaced,
            date=sale_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    persist(ctx)
    shop_obj = shop_service.require_shop(shop_id)
    click.echo(f"Recorded sale {txn.id}")
    click.echo(f"  Shop: {shop_obj.name}")
    click.echo(f"  Date: {txn.date:%Y-%m-%d}")
    click.echo(f"  Flowers sold: {txn.flowers_sold}")
    if txn.replaced_flowers:
        click.echo(f"  Replaced: {txn.replaced_flowers}")
    click.echo(f"  Rate: ₹{txn.rate}")
    click.echo(f"  Total amount: ₹{txn.amount:,.2f}")
    click.echo(f"  Cash received: ₹{txn.cash_received:,.2f}")
    click.echo(f"  Previous balance: ₹{txn.previous_balance:,.2f}")
    click.echo(f"  New balance: ₹{txn.outstanding_balance:,.2f}")
    shop_balance = ledger.balance_of(shop_id)
    if shop_balance != txn.outstanding_balance:
        click.echo(f"  Shop balance: ₹{shop_balance:,.2f}")
    click.echo(f"  Stock in hand: {store.available_stock}")


def register_commands(cli: click.Group) -> None:
    """Register sale command with main CLI."""
    cli.add_command(record_sale)
