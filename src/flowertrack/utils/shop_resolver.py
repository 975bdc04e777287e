"""Utility for resolving shop names to IDs."""

from flowertrack.domain.errors import NotFoundError, ValidationError
from flowertrack.domain.shop import ShopService


def resolve_shop(shop_service: ShopService, shop: str) -> str:
    """Resolve a shop name or ID to a shop ID.

    An exact ID match wins. Otherwise the name is matched ignoring case.

    Args:
        shop_service: ShopService instance
        shop: Shop ID or name

    Returns:
        Shop ID

    Raises:
        NotFoundError: If no shop matches
        ValidationError: If the name matches more than one shop
    """
    shop = shop.strip()
    if shop_service.get_shop(shop) is not None:
        return shop

    matches = [s for s in shop_service.list_shops() if s.name.casefold() == shop.casefold()]
    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        ids = ", ".join(s.id for s in matches)
        raise ValidationError(f"Shop name '{shop}' is ambiguous; use one of the IDs: {ids}")

    raise NotFoundError(f"Shop '{shop}' not found")
