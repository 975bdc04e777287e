"""Summary and reporting domain service."""

from datetime import date, datetime, timedelta, UTC
from decimal import Decimal
from typing import Callable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from flowertrack.domain.entities import (
    DateRange,
    PeriodSummary,
    SortKey,
    TimeWindow,
    TransactionSummary,
    TrendPoint,
    Transaction,
    ValueRange,
)
from flowertrack.domain.errors import NotFoundError, ValidationError, shop_not_found
from flowertrack.domain.store import EntityStore
from flowertrack.utils.date_parser import ensure_utc, timestamp_bounds

ZERO = Decimal("0")

SORT_KEYS: dict[SortKey, Callable[[Transaction], object]] = {
    SortKey.DATE: lambda t: t.date,
    SortKey.RATE: lambda t: t.rate,
    SortKey.OUTSTANDING: lambda t: t.outstanding_balance,
    SortKey.FLOWERS_SOLD: lambda t: t.flowers_sold,
    SortKey.AMOUNT: lambda t: t.amount,
}


class SummaryService:
    """Service for windowed totals, trends and filtered transaction lists.

    Nothing here mutates the store; every result is computed on demand.
    """

    def __init__(self, store: EntityStore):
        """Initialize summary service.

        Args:
            store: Entity store holding the transactions
        """
        self.store = store

    def period_summary(
        self,
        period: TimeWindow | DateRange | str = TimeWindow.DAY,
        shop_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PeriodSummary:
        """Total the sales inside a trailing window or an explicit date range.

        Trailing windows include everything dated on or after the window
        start. ``balance`` is amount minus cash received inside the window,
        not the running ledger balance.

        Args:
            period: Trailing window or explicit date range
            shop_id: Optional shop filter
            now: Reference time for trailing windows (defaults to now)

        Returns:
            PeriodSummary for the matching transactions
        """
        if isinstance(period, DateRange):
            start, end = timestamp_bounds(period.start, period.end)
        else:
            start, end = window_start(coerce_window(period), now), None

        with self.store.lock:
            self._check_shop(shop_id)
            transactions = [
                t
                for t in self.store.list_transactions()
                if (shop_id is None or t.shop_id == shop_id)
                and _within(t.date, start, end)
            ]
        return summarize_period(transactions)

    def delivery_trend(
        self,
        shop_id: str,
        window: TimeWindow | str = TimeWindow.MONTH,
        now: Optional[datetime] = None,
    ) -> list[TrendPoint]:
        """Build a shop's delivery series with a running total of flowers.

        Raises:
            NotFoundError: If the shop doesn't exist
        """
        now = ensure_utc(now) if now is not None else datetime.now(UTC)
        start = window_start(coerce_window(window), now)

        with self.store.lock:
            self._check_shop(shop_id)
            transactions = [
                t
                for t in self.store.shop_transactions(shop_id)
                if _within(t.date, start, now)
            ]

        cumulative = 0
        points = []
        for txn in transactions:
            cumulative += txn.flowers_sold
            points.append(
                TrendPoint(
                    date=txn.date,
                    flowers_sold=txn.flowers_sold,
                    cumulative_quantity=cumulative,
                    amount=txn.amount,
                )
            )
        return points

    def filtered_transactions(
        self,
        date_range: Optional[DateRange] = None,
        window: Optional[TimeWindow | str] = None,
        shop_id: Optional[str] = None,
        rate_range: Optional[ValueRange] = None,
        outstanding_range: Optional[ValueRange] = None,
        on_date: Optional[date] = None,
        sort_by: SortKey | str = SortKey.DATE,
        descending: bool = False,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        """List transactions matching every given predicate.

        An explicit ``date_range`` takes precedence over ``window``. Windows
        other than ALL end at ``now``.

        Args:
            date_range: Optional explicit date range
            window: Optional trailing window
            shop_id: Optional shop filter
            rate_range: Optional inclusive rate bounds
            outstanding_range: Optional inclusive outstanding balance bounds
            on_date: Optional single calendar day (UTC)
            sort_by: Ordering, date by default
            descending: Reverse the ordering
            now: Reference time for trailing windows (defaults to now)

        Returns:
            Matching transactions
        """
        start = end = None
        if date_range is not None and (
            date_range.start is not None or date_range.end is not None
        ):
            start, end = timestamp_bounds(date_range.start, date_range.end)
        elif window is not None:
            window = coerce_window(window)
            if window is not TimeWindow.ALL:
                end = ensure_utc(now) if now is not None else datetime.now(UTC)
                start = window_start(window, end)

        with self.store.lock:
            self._check_shop(shop_id)
            transactions = [
                t
                for t in self.store.list_transactions()
                if (shop_id is None or t.shop_id == shop_id)
                and _within(t.date, start, end)
                and (on_date is None or t.date.date() == on_date)
                and (rate_range is None or rate_range.contains(t.rate))
                and (
                    outstanding_range is None
                    or outstanding_range.contains(t.outstanding_balance)
                )
            ]
        return sort_transactions(transactions, sort_by, descending)

    def _check_shop(self, shop_id: Optional[str]) -> None:
        if shop_id is not None and self.store.get_shop(shop_id) is None:
            raise NotFoundError(shop_not_found(shop_id))


def window_start(window: TimeWindow, now: Optional[datetime] = None) -> Optional[datetime]:
    """Get the lower bound of a trailing window, or None for ALL."""
    now = ensure_utc(now) if now is not None else datetime.now(UTC)
    if window is TimeWindow.DAY:
        return now - timedelta(days=1)
    if window is TimeWindow.WEEK:
        return now - timedelta(days=7)
    if window is TimeWindow.MONTH:
        return now - relativedelta(months=1)
    if window is TimeWindow.LAST_30_DAYS:
        return now - timedelta(days=30)
    return None


def coerce_window(value: TimeWindow | str) -> TimeWindow:
    """Accept a TimeWindow or its string value.

    Raises:
        ValidationError: If the value names no window
    """
    if isinstance(value, TimeWindow):
        return value
    try:
        return TimeWindow(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(w.value for w in TimeWindow)
        raise ValidationError(f"Unknown window '{value}'. Supported windows: {choices}")


def summarize_period(transactions: Sequence[Transaction]) -> PeriodSummary:
    """Total a list of transactions.

    Replaced flowers count towards the units handled, so they lower the
    average price.
    """
    total_sold = sum(t.flowers_sold for t in transactions)
    total_replaced = sum(t.replaced_flowers for t in transactions)
    total_amount = sum((t.amount for t in transactions), ZERO)
    total_received = sum((t.cash_received for t in transactions), ZERO)
    average_price = (
        total_amount / (total_sold + total_replaced) if total_sold > 0 else ZERO
    )
    return PeriodSummary(
        total_sold=total_sold,
        total_replaced=total_replaced,
        total_amount=total_amount,
        total_received=total_received,
        balance=total_amount - total_received,
        average_price=average_price,
        transaction_count=len(transactions),
    )


def transaction_summary(transactions: Sequence[Transaction]) -> TransactionSummary:
    """Footer totals for a transaction table.

    ``total_outstanding`` is the balance of the last row, so the list should
    be in date order.
    """
    count = len(transactions)
    return TransactionSummary(
        total_flowers=sum(t.flowers_sold for t in transactions),
        total_amount=sum((t.amount for t in transactions), ZERO),
        total_received=sum((t.cash_received for t in transactions), ZERO),
        average_rate=(
            sum((t.rate for t in transactions), ZERO) / count if count else ZERO
        ),
        total_outstanding=transactions[-1].outstanding_balance if count else ZERO,
    )


def sort_transactions(
    transactions: Sequence[Transaction],
    sort_by: SortKey | str = SortKey.DATE,
    descending: bool = False,
) -> list[Transaction]:
    """Order transactions by one of the fixed sort keys.

    The sort is stable, so rows with equal keys keep their incoming order.

    Raises:
        ValidationError: If ``sort_by`` names no sort key
    """
    if not isinstance(sort_by, SortKey):
        try:
            sort_by = SortKey(str(sort_by).strip().lower())
        except ValueError:
            choices = ", ".join(k.value for k in SortKey)
            raise ValidationError(f"Unknown sort key '{sort_by}'. Use one of: {choices}")
    return sorted(transactions, key=SORT_KEYS[sort_by], reverse=descending)


def _within(moment: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True
