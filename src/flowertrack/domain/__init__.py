"""Domain layer for flowertrack application."""

from flowertrack.domain.store import EntityStore
from flowertrack.domain.shop import ShopService
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.inventory import InventoryService
from flowertrack.domain.summary import SummaryService

__all__ = [
    "EntityStore",
    "ShopService",
    "LedgerService",
    "InventoryService",
    "SummaryService",
]
