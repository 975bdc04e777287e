"""CLI helpers for shop resolution and store persistence."""

from __future__ import annotations

import click
from flowertrack.domain.errors import DomainError
from flowertrack.domain.shop import ShopService
from flowertrack.domain.store import EntityStore
from flowertrack.cli.error_handling import handle_domain_error
from flowertrack.utils.shop_resolver import resolve_shop


def get_store(ctx: click.Context) -> EntityStore:
    """Return the entity store loaded by the root command."""
    return ctx.obj["store"]


def persist(ctx: click.Context) -> None:
    """Write the entity store back to the database."""
    ctx.obj["db"].save_store(ctx.obj["store"])


def resolve_shop_or_exit(
    ctx: click.Context, shop_service: ShopService, shop: str
) -> str:
    """Resolve shop name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_shop(shop_service, shop)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
