"""In-memory entity store shared by the domain services."""

import threading
import time
from decimal import Decimal
from typing import Iterable, Optional

from flowertrack.domain.entities import Shop, StockMovement, Transaction


class EntityStore:
    """Holds shops, transactions, stock movements and the two stock counters.

    The store has no business rules of its own. Services validate first and
    then call the mutators here, holding ``lock`` for the whole operation so
    that readers never observe half of a change.
    """

    def __init__(
        self,
        shops: Iterable[Shop] = (),
        transactions: Iterable[Transaction] = (),
        stock_movements: Iterable[StockMovement] = (),
        available_stock: int = 0,
        godown_stock: int = 0,
        opening_available_stock: int = 0,
        opening_godown_stock: int = 0,
    ):
        """Initialize the store.

        Args:
            shops: Shops in creation order
            transactions: Transactions in insertion order
            stock_movements: Stock movements in insertion order
            available_stock: Current available-for-sale counter
            godown_stock: Current godown counter
            opening_available_stock: Available stock before any logged event
            opening_godown_stock: Godown stock before any logged event
        """
        self.lock = threading.RLock()
        self.available_stock = available_stock
        self.godown_stock = godown_stock
        self.opening_available_stock = opening_available_stock
        self.opening_godown_stock = opening_godown_stock

        self._shops: dict[str, Shop] = {}
        self._transactions: dict[str, Transaction] = {}
        self._insertion_order: dict[str, int] = {}
        self._movements: list[StockMovement] = []
        self._balance_cache: dict[str, Decimal] = {}
        self._last_id = 0

        for shop in shops:
            self.add_shop(shop)
        for txn in transactions:
            self.add_transaction(txn)
        for movement in stock_movements:
            self.add_stock_movement(movement)

    # Identity
    def new_id(self) -> str:
        """Return a fresh id derived from the current time in milliseconds.

        Ids increase in creation order and never repeat within the store.
        """
        with self.lock:
            candidate = max(int(time.time() * 1000), self._last_id + 1)
            while self._id_taken(str(candidate)):
                candidate += 1
            self._last_id = candidate
            return str(candidate)

    def _id_taken(self, entity_id: str) -> bool:
        return (
            entity_id in self._shops
            or entity_id in self._transactions
            or any(m.id == entity_id for m in self._movements)
        )

    # Shops
    def add_shop(self, shop: Shop) -> None:
        with self.lock:
            if shop.id in self._shops:
                raise ValueError(f"Shop id '{shop.id}' already exists")
            self._shops[shop.id] = shop

    def replace_shop(self, shop: Shop) -> None:
        with self.lock:
            if shop.id not in self._shops:
                raise KeyError(shop.id)
            self._shops[shop.id] = shop

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        return self._shops.get(shop_id)

    def list_shops(self) -> list[Shop]:
        """List shops in creation order."""
        with self.lock:
            return list(self._shops.values())

    # Transactions
    def add_transaction(self, txn: Transaction) -> None:
        with self.lock:
            if txn.id in self._transactions:
                raise ValueError(f"Transaction id '{txn.id}' already exists")
            self._insertion_order[txn.id] = len(self._insertion_order)
            self._transactions[txn.id] = txn
            self._balance_cache.pop(txn.shop_id, None)

    def replace_transaction(self, txn: Transaction) -> None:
        with self.lock:
            current = self._transactions.get(txn.id)
            if current is None:
                raise KeyError(txn.id)
            if current.shop_id != txn.shop_id:
                raise ValueError("A transaction cannot move to another shop")
            self._transactions[txn.id] = txn
            self._balance_cache.pop(txn.shop_id, None)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def chronological_key(self, txn: Transaction) -> tuple:
        """Sort key ordering by date, then by insertion order."""
        return (txn.date, self._insertion_order[txn.id])

    def list_transactions(self) -> list[Transaction]:
        """List all transactions by date ascending, ties in insertion order."""
        with self.lock:
            return sorted(self._transactions.values(), key=self.chronological_key)

    def shop_transactions(self, shop_id: str) -> list[Transaction]:
        """List one shop's transactions by date ascending, ties in insertion order."""
        with self.lock:
            return sorted(
                (t for t in self._transactions.values() if t.shop_id == shop_id),
                key=self.chronological_key,
            )

    def cached_balance(self, shop_id: str) -> Optional[Decimal]:
        return self._balance_cache.get(shop_id)

    def cache_balance(self, shop_id: str, balance: Decimal) -> None:
        self._balance_cache[shop_id] = balance

    # Stock movements
    def add_stock_movement(self, movement: StockMovement) -> None:
        with self.lock:
            self._movements.append(movement)

    def list_stock_movements(self) -> list[StockMovement]:
        """List stock movements by date ascending, ties in insertion order."""
        with self.lock:
            # sorted() is stable, so equal dates keep insertion order
            return sorted(self._movements, key=lambda m: m.date)
