"""Domain model entities for flowertrack.

These are pure data classes representing business concepts, independent of
how the snapshot is persisted. Mutation happens by replacing an instance in
the entity store, never by changing one in place.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ShopContact:
    """Alternate contact number for a shop."""

    label: str
    phone: str


@dataclass(frozen=True)
class Shop:
    """Shop (customer) domain entity."""

    id: str
    name: str
    owner: str
    phone: str
    address: str
    alternate_contacts: tuple[ShopContact, ...] = ()
    location: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """One dated delivery to a shop.

    ``outstanding_balance`` is derived by the ledger engine and is only ever
    assigned by a balance recomputation.
    """

    id: str
    shop_id: str
    date: datetime
    flowers_sold: int
    rate: Decimal
    cash_received: Decimal
    replaced_flowers: int = 0
    outstanding_balance: Decimal = Decimal("0")

    @property
    def amount(self) -> Decimal:
        """Value of the flowers sold in this delivery."""
        return self.flowers_sold * self.rate

    @property
    def balance_change(self) -> Decimal:
        """Change this delivery makes to the shop's running balance."""
        return self.amount - self.cash_received

    @property
    def previous_balance(self) -> Decimal:
        """Shop balance just before this delivery in the date order."""
        return self.outstanding_balance - self.balance_change


class StockType(Enum):
    """Inventory pool targeted by a stock movement."""

    GODOWN = "godown"
    AVAILABLE = "available"


@dataclass(frozen=True)
class StockMovement:
    """Append-only record of stock entering the godown or moving to sale."""

    id: str
    type: StockType
    quantity: int
    date: datetime


class TimeWindow(Enum):
    """Trailing windows measured back from "now"."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    LAST_30_DAYS = "30days"
    ALL = "all"


@dataclass(frozen=True)
class DateRange:
    """Explicit date range, both bounds optional and inclusive.

    Bounds may be dates or datetimes. A bare date as ``end`` covers that
    whole day.
    """

    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class ValueRange:
    """Inclusive numeric range with optional bounds."""

    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None

    def contains(self, value: Decimal) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


class SortKey(Enum):
    """Fields a transaction listing can be ordered by."""

    DATE = "date"
    RATE = "rate"
    OUTSTANDING = "outstanding"
    FLOWERS_SOLD = "flowers"
    AMOUNT = "amount"


@dataclass(frozen=True)
class PeriodSummary:
    """Totals for the transactions inside one window."""

    total_sold: int
    total_replaced: int
    total_amount: Decimal
    total_received: Decimal
    balance: Decimal
    average_price: Decimal
    transaction_count: int = 0


@dataclass(frozen=True)
class TrendPoint:
    """One delivery in a shop's trend series."""

    date: datetime
    flowers_sold: int
    cumulative_quantity: int
    amount: Decimal


@dataclass(frozen=True)
class TransactionSummary:
    """Footer totals for a list of transactions."""

    total_flowers: int
    total_amount: Decimal
    total_received: Decimal
    average_rate: Decimal
    total_outstanding: Decimal


@dataclass(frozen=True)
class MovementTotals:
    """Totals for a list of stock movements."""

    count: int
    added_to_godown: int
    moved_to_available: int


@dataclass(frozen=True)
class StockReconciliation:
    """Cached inventory counters compared with the values folded from the logs."""

    available_stock: int
    godown_stock: int
    derived_available: int
    derived_godown: int
    repaired: bool = False

    @property
    def in_balance(self) -> bool:
        return (
            self.available_stock == self.derived_available
            and self.godown_stock == self.derived_godown
        )
