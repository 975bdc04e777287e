"""Inventory domain service."""

import logging
from datetime import date, datetime, UTC
from typing import Optional

from flowertrack.domain.entities import (
    MovementTotals,
    StockMovement,
    StockReconciliation,
    StockType,
)
from flowertrack.domain.errors import (
    InsufficientStockError,
    ValidationError,
    insufficient_stock,
    invalid_quantity,
)
from flowertrack.domain.store import EntityStore
from flowertrack.utils.date_parser import timestamp_bounds, to_timestamp

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for the godown and available stock counters."""

    def __init__(self, store: EntityStore):
        """Initialize inventory service.

        Args:
            store: Entity store holding the counters and movement log
        """
        self.store = store

    def add_stock(
        self,
        stock_type: StockType | str,
        quantity: int,
        date: Optional[date | datetime] = None,
    ) -> StockMovement:
        """Record stock arriving in the godown or moving into the sale pool.

        A godown movement adds new stock. An available movement transfers
        units out of the godown into the available pool.

        Args:
            stock_type: Pool receiving the units
            quantity: Number of units, must be positive
            date: Movement date (defaults to now)

        Returns:
            The logged stock movement

        Raises:
            ValidationError: If the type or quantity is invalid
            InsufficientStockError: If a transfer exceeds the godown stock
        """
        stock_type = coerce_stock_type(stock_type)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(invalid_quantity("Quantity", quantity))
        when = to_timestamp(date) if date is not None else datetime.now(UTC)

        with self.store.lock:
            if stock_type is StockType.AVAILABLE and quantity > self.store.godown_stock:
                raise InsufficientStockError(
                    insufficient_stock("godown", quantity, self.store.godown_stock),
                    requested=quantity,
                    available=self.store.godown_stock,
                )

            movement = StockMovement(
                id=self.store.new_id(), type=stock_type, quantity=quantity, date=when
            )
            if stock_type is StockType.AVAILABLE:
                self.store.godown_stock -= quantity
                self.store.available_stock += quantity
            else:
                self.store.godown_stock += quantity
            self.store.add_stock_movement(movement)

        logger.info(
            "Added %d flowers to %s stock (available=%d, godown=%d)",
            quantity,
            stock_type.value,
            self.store.available_stock,
            self.store.godown_stock,
        )
        return movement

    def sale_adjustment(
        self,
        flowers_sold: int,
        replaced_flowers: int = 0,
        previous_sold: Optional[int] = None,
        previous_replaced: Optional[int] = None,
    ) -> int:
        """Work out the available stock after a sale, without changing it.

        A new sale must not sell more flowers than are in hand. When a
        transaction is edited, ``previous_sold``/``previous_replaced`` hold
        its current figures and only the net change in stock is checked, so
        an edit that leaves the counts alone always passes.

        Returns:
            New value for the available stock counter

        Raises:
            InsufficientStockError: If the sale needs more flowers than are available
        """
        with self.store.lock:
            available = self.store.available_stock
            if previous_sold is None and previous_replaced is None:
                if flowers_sold > available:
                    raise InsufficientStockError(
                        insufficient_stock("available", flowers_sold, available),
                        requested=flowers_sold,
                        available=available,
                    )
                return available - flowers_sold + replaced_flowers

            result = (
                available
                + ((previous_sold or 0) - flowers_sold)
                + (replaced_flowers - (previous_replaced or 0))
            )
            if result < 0:
                needed = available - result
                raise InsufficientStockError(
                    insufficient_stock("available", needed, available),
                    requested=needed,
                    available=available,
                )
            return result

    def commit_available(self, available_stock: int) -> None:
        """Store a counter value produced by ``sale_adjustment``."""
        if available_stock < 0:
            raise ValueError("Available stock cannot go negative")
        self.store.available_stock = available_stock

    def list_movements(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        stock_type: Optional[StockType | str] = None,
    ) -> list[StockMovement]:
        """List stock movements by date, optionally filtered.

        Args:
            start: Optional start date filter (inclusive)
            end: Optional end date filter (inclusive, whole day for dates)
            stock_type: Optional pool filter

        Returns:
            Matching movements, oldest first
        """
        start_ts, end_ts = timestamp_bounds(start, end)
        wanted = coerce_stock_type(stock_type) if stock_type is not None else None
        return [
            m
            for m in self.store.list_stock_movements()
            if (start_ts is None or m.date >= start_ts)
            and (end_ts is None or m.date <= end_ts)
            and (wanted is None or m.type is wanted)
        ]

    def movement_totals(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> MovementTotals:
        """Total the movements inside a date range."""
        movements = self.list_movements(start=start, end=end)
        return MovementTotals(
            count=len(movements),
            added_to_godown=sum(
                m.quantity for m in movements if m.type is StockType.GODOWN
            ),
            moved_to_available=sum(
                m.quantity for m in movements if m.type is StockType.AVAILABLE
            ),
        )

    def derive_counters(self) -> tuple[int, int]:
        """Fold the opening counters, movement log and sales into (available, godown)."""
        with self.store.lock:
            available = self.store.opening_available_stock
            godown = self.store.opening_godown_stock
            for movement in self.store.list_stock_movements():
                if movement.type is StockType.AVAILABLE:
                    available += movement.quantity
                    godown -= movement.quantity
                else:
                    godown += movement.quantity
            for txn in self.store.list_transactions():
                available += txn.replaced_flowers - txn.flowers_sold
            return available, godown

    def reconcile(self, repair: bool = False) -> StockReconciliation:
        """Compare the cached counters with the values derived from the logs.

        Args:
            repair: If True, overwrite drifted counters with the derived values

        Returns:
            Reconciliation report (counter values as found, before any repair)
        """
        with self.store.lock:
            derived_available, derived_godown = self.derive_counters()
            report = StockReconciliation(
                available_stock=self.store.available_stock,
                godown_stock=self.store.godown_stock,
                derived_available=derived_available,
                derived_godown=derived_godown,
            )
            if report.in_balance:
                return report

            logger.warning(
                "Stock counters drifted: available %d (derived %d), godown %d (derived %d)",
                report.available_stock,
                derived_available,
                report.godown_stock,
                derived_godown,
            )
            if not repair:
                return report
            if derived_available < 0 or derived_godown < 0:
                raise ValidationError(
                    "Derived stock counters are negative; the logs cannot be repaired automatically"
                )
            self.store.available_stock = derived_available
            self.store.godown_stock = derived_godown
            logger.warning("Stock counters reset to derived values")
            return StockReconciliation(
                available_stock=report.available_stock,
                godown_stock=report.godown_stock,
                derived_available=derived_available,
                derived_godown=derived_godown,
                repaired=True,
            )


def coerce_stock_type(value: StockType | str) -> StockType:
    """Accept a StockType or its string value.

    Raises:
        ValidationError: If the value names no stock pool
    """
    if isinstance(value, StockType):
        return value
    try:
        return StockType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown stock type '{value}'. Use 'godown' or 'available'"
        )
