"""Shop management commands."""

import click
from flowertrack.domain.errors import DomainError
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.shop import ShopService
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.cli.shop_resolution import get_store, persist, resolve_shop_or_exit


def _parse_contacts(ctx, contacts: tuple[str, ...]) -> list[tuple[str, str]]:
    """Split LABEL=PHONE pairs."""
    parsed = []
    for contact in contacts:
        label, sep, phone = contact.partition("=")
        if not sep:
            click.echo(f"Error: Contact '{contact}' must look like LABEL=PHONE", err=True)
            ctx.exit(1)
        parsed.append((label, phone))
    return parsed


@click.group()
def shop_group():
    """Manage shops."""
    pass


@shop_group.command("add")
@click.argument("name", metavar="SHOP_NAME")
@click.option("--owner", required=True, help="Owner name")
@click.option("--phone", required=True, help="Primary phone number")
@click.option("--address", required=True, help="Shop address")
@click.option(
    "--contact",
    "contacts",
    multiple=True,
    help="Alternate contact as LABEL=PHONE (repeatable)",
)
@click.option("--location", help="Geocoordinates, e.g. '9.93,78.12'")
@click.pass_context
def add_shop(
    ctx,
    name: str,
    owner: str,
    phone: str,
    address: str,
    contacts: tuple[str, ...],
    location: str | None,
):
    """Add a new shop.

    Examples:
        flowertrack shop add "Lakshmi Stores" --owner Ravi --phone 9876543210 --address "Main Road"
        flowertrack shop add "Anbu Flowers" --owner Anbu --phone 98 --address "Bazaar" --contact Son=99
    """
    store = get_store(ctx)
    service = ShopService(store)

    try:
        shop = service.add_shop(
            name=name,
            owner=owner,
            phone=phone,
            address=address,
            alternate_contacts=_parse_contacts(ctx, contacts),
            location=location,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    persist(ctx)
    click.echo(f"Created shop '{shop.name}' (ID: {shop.id})")


@shop_group.command("edit")
@click.argument("shop", metavar="SHOP")
@click.option("--name", help="New shop name")
@click.option("--owner", help="New owner name")
@click.option("--phone", help="New primary phone number")
@click.option("--address", help="New address")
@click.option(
    "--contact",
    "contacts",
    multiple=True,
    help="Replace alternate contacts with LABEL=PHONE entries (repeatable)",
)
@click.option("--location", help="New geocoordinates (empty string clears)")
@click.pass_context
def edit_shop(
    ctx,
    shop: str,
    name: str | None,
    owner: str | None,
    phone: str | None,
    address: str | None,
    contacts: tuple[str, ...],
    location: str | None,
) -> None:
    """Update a shop.

    SHOP can be a shop name or ID. Only the options given are changed.
    """
    store = get_store(ctx)
    service = ShopService(store)
    shop_id = resolve_shop_or_exit(ctx, service, shop)

    changes = {}
    if contacts:
        changes["alternate_contacts"] = _parse_contacts(ctx, contacts)
    if location is not None:
        changes["location"] = location or None

    try:
        updated = service.edit_shop(
            shop_id, name=name, owner=owner, phone=phone, address=address, **changes
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    persist(ctx)
    click.echo(f"Updated shop '{updated.name}' (ID: {updated.id})")


@shop_group.command("list")
@click.option("--search", help="Only shops whose name contains this text")
@click.pass_context
def list_shops(ctx, search: str | None):
    """List shops with their outstanding balance."""
    store = get_store(ctx)
    service = ShopService(store)
    ledger = LedgerService(store)

    shops = service.search_shops(search) if search else service.list_shops()
    if not shops:
        click.echo("No shops found.")
        return

    click.echo("\nShops:")
    click.echo("-" * 90)
    for s in shops:
        balance = ledger.balance_of(s.id)
        click.echo(
            f"ID: {s.id:<14} | {s.name:24s} | {s.owner:16s} | {s.phone:12s} | ₹{balance:,.2f}"
        )


@shop_group.command("show")
@click.argument("shop", metavar="SHOP")
@click.pass_context
def show_shop(ctx, shop: str):
    """Show a shop's details, balance and last delivery."""
    store = get_store(ctx)
    service = ShopService(store)
    ledger = LedgerService(store)
    shop_id = resolve_shop_or_exit(ctx, service, shop)
    s = service.require_shop(shop_id)

    click.echo(f"Shop: {s.name} (ID: {s.id})")
    click.echo(f"  Owner: {s.owner}")
    click.echo(f"  Phone: {s.phone}")
    for contact in s.alternate_contacts:
        click.echo(f"  {contact.label}: {contact.phone}")
    click.echo(f"  Address: {s.address}")
    if s.location:
        click.echo(f"  Location: {s.location}")
    click.echo(f"  Outstanding: ₹{ledger.balance_of(s.id):,.2f}")

    last = ledger.last_delivery(s.id)
    if last is not None:
        click.echo(
            f"  Last delivery: {last.date:%Y-%m-%d} - {last.flowers_sold} flowers at ₹{last.rate}"
        )


def register_commands(cli: click.Group) -> None:
    """Register shop commands with main CLI."""
    cli.add_command(shop_group, name="shop")
