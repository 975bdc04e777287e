"""Ledger domain service.

Every shop's outstanding balance is a running fold over its transactions in
date order. Inserting a backdated sale or editing an old one changes every
later balance, so both paths end in ``recalculate_shop_balances``, the only
place balances are assigned.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional

from flowertrack.domain.entities import Shop, Transaction
from flowertrack.domain.errors import (
    NotFoundError,
    ValidationError,
    negative_value,
    shop_not_found,
    transaction_not_found,
)
from flowertrack.domain.inventory import InventoryService
from flowertrack.domain.store import EntityStore
from flowertrack.utils.amount_parser import parse_amount, parse_quantity
from flowertrack.utils.date_parser import to_timestamp

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class LedgerService:
    """Service for recording sales and tracking what each shop owes."""

    def __init__(self, store: EntityStore):
        """Initialize ledger service.

        Args:
            store: Entity store holding shops and transactions
        """
        self.store = store
        self.inventory = InventoryService(store)

    def record_sale(
        self,
        shop_id: str,
        flowers_sold: int | str,
        rate: Decimal | str,
        cash_received: Decimal | str,
        replaced_flowers: int | str | None = 0,
        date: Optional[date | datetime] = None,
    ) -> Transaction:
        """Record a delivery to a shop.

        The available stock is debited by the flowers sold and credited by
        the replaced flowers handed back.

        Args:
            shop_id: Shop receiving the delivery
            flowers_sold: Number of flowers sold
            rate: Price per flower
            cash_received: Cash collected with this delivery
            replaced_flowers: Defective flowers replaced free of charge
            date: Delivery date, may be in the past (defaults to now)

        Returns:
            The stored transaction with its outstanding balance

        Raises:
            NotFoundError: If the shop doesn't exist
            ValidationError: If a numeric input is missing, malformed or negative
            InsufficientStockError: If more flowers are sold than are available
        """
        sold = coerce_count("Flowers sold", flowers_sold)
        price = coerce_money("Rate", rate)
        cash = coerce_money("Cash received", cash_received)
        replaced = coerce_count("Replaced flowers", replaced_flowers, default=0)
        when = to_timestamp(date) if date is not None else datetime.now(UTC)

        with self.store.lock:
            if self.store.get_shop(shop_id) is None:
                raise NotFoundError(shop_not_found(shop_id))
            new_available = self.inventory.sale_adjustment(sold, replaced)

            txn = Transaction(
                id=self.store.new_id(),
                shop_id=shop_id,
                date=when,
                flowers_sold=sold,
                rate=price,
                cash_received=cash,
                replaced_flowers=replaced,
            )
            self.store.add_transaction(txn)
            self.recalculate_shop_balances(shop_id)
            self.inventory.commit_available(new_available)
            txn = self.store.get_transaction(txn.id)

        logger.info(
            "Recorded sale %s for shop %s: %d @ %s, received %s, balance %s",
            txn.id,
            shop_id,
            sold,
            price,
            cash,
            txn.outstanding_balance,
        )
        return txn

    def edit_transaction(
        self,
        transaction_id: str,
        flowers_sold: int | str | None = None,
        rate: Decimal | str | None = None,
        cash_received: Decimal | str | None = None,
        replaced_flowers: int | str | None = None,
        date: Optional[date | datetime] = None,
    ) -> Transaction:
        """Update a transaction and recompute its shop's balances.

        Only the fields that are provided change; the shop cannot change.
        The available stock follows any change to the flowers sold or
        replaced.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If a numeric input is malformed or negative
            InsufficientStockError: If the edit sells more flowers than are available
        """
        with self.store.lock:
            current = self.store.get_transaction(transaction_id)
            if current is None:
                raise NotFoundError(transaction_not_found(transaction_id))

            updated = replace(
                current,
                flowers_sold=(
                    current.flowers_sold
                    if flowers_sold is None
                    else coerce_count("Flowers sold", flowers_sold)
                ),
                rate=current.rate if rate is None else coerce_money("Rate", rate),
                cash_received=(
                    current.cash_received
                    if cash_received is None
                    else coerce_money("Cash received", cash_received)
                ),
                replaced_flowers=(
                    current.replaced_flowers
                    if replaced_flowers is None
                    else coerce_count("Replaced flowers", replaced_flowers)
                ),
                date=current.date if date is None else to_timestamp(date),
            )
            new_available = self.inventory.sale_adjustment(
                updated.flowers_sold,
                updated.replaced_flowers,
                previous_sold=current.flowers_sold,
                previous_replaced=current.replaced_flowers,
            )

            self.store.replace_transaction(updated)
            self.recalculate_shop_balances(current.shop_id)
            self.inventory.commit_available(new_available)
            updated = self.store.get_transaction(transaction_id)

        logger.info("Edited transaction %s for shop %s", transaction_id, current.shop_id)
        return updated

    def recalculate_shop_balances(self, shop_id: str) -> list[Transaction]:
        """Recompute the running balance of every transaction of a shop.

        Returns:
            The shop's transactions in date order with fresh balances
        """
        with self.store.lock:
            running = ZERO
            result = []
            for txn in self.store.shop_transactions(shop_id):
                running += txn.balance_change
                if txn.outstanding_balance != running:
                    txn = replace(txn, outstanding_balance=running)
                    self.store.replace_transaction(txn)
                result.append(txn)
            self.store.cache_balance(shop_id, running)

        logger.debug("Recalculated %d balances for shop %s", len(result), shop_id)
        return result

    def recalculate_all(self) -> None:
        """Recompute balances for every shop that has transactions."""
        with self.store.lock:
            for shop_id in {t.shop_id for t in self.store.list_transactions()}:
                self.recalculate_shop_balances(shop_id)

    def verify_ledger(self) -> list[str]:
        """Return ids of transactions whose stored balance disagrees with the fold."""
        mismatched = []
        with self.store.lock:
            running: dict[str, Decimal] = {}
            for txn in self.store.list_transactions():
                balance = running.get(txn.shop_id, ZERO) + txn.balance_change
                running[txn.shop_id] = balance
                if txn.outstanding_balance != balance:
                    mismatched.append(txn.id)
        return mismatched

    def shop_transactions(self, shop_id: str) -> list[Transaction]:
        """List a shop's transactions in date order."""
        return self.store.shop_transactions(shop_id)

    def balance_of(self, shop_id: str) -> Decimal:
        """Get what a shop currently owes.

        Returns:
            Balance of the shop's latest transaction, or 0 if it has none
        """
        with self.store.lock:
            cached = self.store.cached_balance(shop_id)
            if cached is not None:
                return cached
            transactions = self.store.shop_transactions(shop_id)
            balance = transactions[-1].outstanding_balance if transactions else ZERO
            self.store.cache_balance(shop_id, balance)
            return balance

    def total_outstanding(self) -> Decimal:
        """Sum of the current balances of all shops."""
        with self.store.lock:
            return sum(
                (self.balance_of(shop.id) for shop in self.store.list_shops()), ZERO
            )

    def shops_with_outstanding(self) -> list[tuple[Shop, Decimal]]:
        """List shops that owe money, largest balance first."""
        with self.store.lock:
            balances = [
                (shop, self.balance_of(shop.id)) for shop in self.store.list_shops()
            ]
        owing = [(shop, balance) for shop, balance in balances if balance > 0]
        return sorted(owing, key=lambda item: item[1], reverse=True)

    def last_delivery(self, shop_id: str) -> Optional[Transaction]:
        """Get the shop's most recent delivery, or None."""
        transactions = self.store.shop_transactions(shop_id)
        return transactions[-1] if transactions else None

    def last_sale_rate(self, shop_id: str) -> Optional[Decimal]:
        """Get the rate of the shop's most recent delivery, or None."""
        last = self.last_delivery(shop_id)
        return last.rate if last is not None else None


def coerce_count(field: str, value: object, default: Optional[int] = None) -> int:
    """Validate a non-negative whole number of flowers.

    Raises:
        ValidationError: If the value is missing, not a whole number or negative
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is not None:
            return default
        raise ValidationError(f"{field} is required")
    if isinstance(value, str):
        try:
            value = parse_quantity(value)
        except ValueError as e:
            raise ValidationError(f"{field}: {e}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be a whole number (got {value!r})")
    if value < 0:
        raise ValidationError(negative_value(field, value))
    return value


def coerce_money(field: str, value: object) -> Decimal:
    """Validate a non-negative money amount.

    Raises:
        ValidationError: If the value is missing, not numeric or negative
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(value, str):
        try:
            amount = parse_amount(value)
        except ValueError as e:
            raise ValidationError(f"{field}: {e}")
    elif isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        amount = Decimal(str(value))
    else:
        raise ValidationError(f"{field} must be a number (got {value!r})")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number (got {value!r})")
    if amount < 0:
        raise ValidationError(negative_value(field, amount))
    return amount
