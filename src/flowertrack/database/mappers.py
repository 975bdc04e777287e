"""Mapper functions to convert between domain entities and the snapshot document.

The document keeps the camelCase field names of the original web app so
that existing snapshots load unchanged.
"""

import logging
from decimal import Decimal
from typing import Any

from flowertrack.domain import entities as domain
from flowertrack.domain.inventory import InventoryService
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.store import EntityStore
from flowertrack.utils.date_parser import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


def shop_to_dict(shop: domain.Shop) -> dict[str, Any]:
    """Convert a Shop entity to its document form."""
    return {
        "id": shop.id,
        "name": shop.name,
        "owner": shop.owner,
        "phone": shop.phone,
        "alternateNumbers": [
            {"name": c.label, "number": c.phone} for c in shop.alternate_contacts
        ],
        "address": shop.address,
        "location": shop.location or "",
    }


def shop_from_dict(data: dict[str, Any]) -> domain.Shop:
    """Convert a document shop to a Shop entity."""
    return domain.Shop(
        id=str(data["id"]),
        name=data.get("name", ""),
        owner=data.get("owner", ""),
        phone=data.get("phone", ""),
        address=data.get("address", ""),
        alternate_contacts=tuple(
            domain.ShopContact(label=c.get("name", ""), phone=c.get("number", ""))
            for c in data.get("alternateNumbers") or []
        ),
        location=data.get("location") or None,
    )


def transaction_to_dict(txn: domain.Transaction) -> dict[str, Any]:
    """Convert a Transaction entity to its document form."""
    return {
        "id": txn.id,
        "shopId": txn.shop_id,
        "flowersSold": txn.flowers_sold,
        "rate": decimal_to_number(txn.rate),
        "cashReceived": decimal_to_number(txn.cash_received),
        "date": format_timestamp(txn.date),
        "replacedFlowers": txn.replaced_flowers,
        "outstandingBalance": decimal_to_number(txn.outstanding_balance),
    }


def transaction_from_dict(data: dict[str, Any]) -> domain.Transaction:
    """Convert a document transaction to a Transaction entity."""
    return domain.Transaction(
        id=str(data["id"]),
        shop_id=str(data["shopId"]),
        date=parse_timestamp(data["date"]),
        flowers_sold=int(data.get("flowersSold") or 0),
        rate=number_to_decimal(data.get("rate")),
        cash_received=number_to_decimal(data.get("cashReceived")),
        replaced_flowers=int(data.get("replacedFlowers") or 0),
        outstanding_balance=number_to_decimal(data.get("outstandingBalance")),
    )


def stock_movement_to_dict(movement: domain.StockMovement) -> dict[str, Any]:
    """Convert a StockMovement entity to its document form."""
    return {
        "id": movement.id,
        "type": movement.type.value,
        "quantity": movement.quantity,
        "date": format_timestamp(movement.date),
    }


def stock_movement_from_dict(data: dict[str, Any]) -> domain.StockMovement:
    """Convert a document stock movement to a StockMovement entity.

    Older documents logged farm deliveries with ``flowersAdded`` instead of
    ``quantity``.
    """
    quantity = data.get("quantity", data.get("flowersAdded", 0))
    return domain.StockMovement(
        id=str(data["id"]),
        type=domain.StockType(data.get("type", "godown")),
        quantity=int(quantity or 0),
        date=parse_timestamp(data["date"]),
    )


def store_to_document(store: EntityStore) -> dict[str, Any]:
    """Serialize the entity store into one JSON-compatible document."""
    return {
        "shops": [shop_to_dict(s) for s in store.list_shops()],
        "transactions": [transaction_to_dict(t) for t in store.list_transactions()],
        "stockMovements": [
            stock_movement_to_dict(m) for m in store.list_stock_movements()
        ],
        "availableStock": store.available_stock,
        "godownStock": store.godown_stock,
        "openingAvailableStock": store.opening_available_stock,
        "openingGodownStock": store.opening_godown_stock,
    }


def document_to_store(document: dict[str, Any]) -> EntityStore:
    """Rebuild an entity store from a snapshot document.

    Missing collections and counters default to empty. Balances are
    recomputed, and when the document carries no opening counters they are
    chosen so that the saved counters reconcile with the logs.
    """
    movements = document.get("stockMovements") or document.get("farmMovements") or []
    store = EntityStore(
        shops=[shop_from_dict(s) for s in document.get("shops") or []],
        transactions=[
            transaction_from_dict(t) for t in document.get("transactions") or []
        ],
        stock_movements=[stock_movement_from_dict(m) for m in movements],
        available_stock=int(document.get("availableStock") or 0),
        godown_stock=int(document.get("godownStock") or 0),
    )

    if "openingAvailableStock" in document or "openingGodownStock" in document:
        store.opening_available_stock = int(document.get("openingAvailableStock") or 0)
        store.opening_godown_stock = int(document.get("openingGodownStock") or 0)
    else:
        derived_available, derived_godown = InventoryService(store).derive_counters()
        store.opening_available_stock = store.available_stock - derived_available
        store.opening_godown_stock = store.godown_stock - derived_godown

    ledger = LedgerService(store)
    stale = ledger.verify_ledger()
    if stale:
        logger.warning("Repairing %d stale balances in loaded snapshot", len(stale))
    ledger.recalculate_all()
    return store


def decimal_to_number(value: Decimal) -> int | float:
    """Render a Decimal as a JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def number_to_decimal(value: Any) -> Decimal:
    """Read a JSON number (or numeric string) as a Decimal; missing is 0."""
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))
