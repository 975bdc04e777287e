"""Tests for the ledger engine."""

import threading
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from flowertrack.domain.errors import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)


def _day(n):
    return datetime(2024, 6, n, 9, 0, tzinfo=UTC)


def _fold(transactions):
    running = Decimal("0")
    balances = []
    for txn in transactions:
        running += txn.flowers_sold * txn.rate - txn.cash_received
        balances.append(running)
    return balances


@pytest.fixture
def shop_id(stocked_store, sample_shop):
    return sample_shop.id


def test_record_sale(ledger_service, stocked_store, shop_id):
    """Test recording a sale updates balance and stock."""
    txn = ledger_service.record_sale(
        shop_id, flowers_sold=10, rate="40", cash_received="150", replaced_flowers=2
    )

    assert txn.amount == Decimal("400")
    assert txn.outstanding_balance == Decimal("250")
    assert ledger_service.balance_of(shop_id) == Decimal("250")
    assert stocked_store.available_stock == 1000 - 10 + 2


def test_record_sale_defaults_date_to_now(ledger_service, shop_id):
    before = datetime.now(UTC)
    txn = ledger_service.record_sale(shop_id, 1, Decimal("5"), Decimal("0"))
    assert before <= txn.date <= datetime.now(UTC)


def test_backdated_sale_that_nets_to_zero(ledger_service, shop_id):
    ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(2))
    ledger_service.record_sale(shop_id, 5, "40", "0", date=_day(3))

    ledger_service.record_sale(shop_id, 10, "40", "400", date=_day(1))

    balances = [t.outstanding_balance for t in ledger_service.shop_transactions(shop_id)]
    assert balances == [Decimal("0"), Decimal("400"), Decimal("600")]


def test_backdated_sale_shifts_later_balances(ledger_service, shop_id):
    ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(2))
    ledger_service.record_sale(shop_id, 5, "40", "0", date=_day(3))
    assert ledger_service.balance_of(shop_id) == Decimal("600")

    ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(1))

    balances = [t.outstanding_balance for t in ledger_service.shop_transactions(shop_id)]
    assert balances == [Decimal("400"), Decimal("800"), Decimal("1000")]
    assert ledger_service.balance_of(shop_id) == Decimal("1000")


def test_same_day_sales_keep_insertion_order(ledger_service, shop_id):
    first = ledger_service.record_sale(shop_id, 1, "10", "0", date=date(2024, 6, 1))
    second = ledger_service.record_sale(shop_id, 2, "10", "0", date=date(2024, 6, 1))

    assert [t.id for t in ledger_service.shop_transactions(shop_id)] == [first.id, second.id]
    assert ledger_service.balance_of(shop_id) == Decimal("30")


def test_sale_rejected_without_stock(ledger_service, store, sample_shop):
    store.available_stock = 5

    with pytest.raises(InsufficientStockError) as excinfo:
        ledger_service.record_sale(sample_shop.id, 10, "40", "0")

    assert excinfo.value.requested == 10
    assert excinfo.value.available == 5
    assert store.available_stock == 5
    assert store.list_transactions() == []


def test_sale_for_unknown_shop(ledger_service, stocked_store):
    with pytest.raises(NotFoundError):
        ledger_service.record_sale("missing", 1, "10", "0")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"flowers_sold": "ten"},
        {"flowers_sold": -1},
        {"flowers_sold": 2.5},
        {"rate": "abc"},
        {"rate": "-4"},
        {"cash_received": ""},
        {"replaced_flowers": -2},
    ],
)
def test_invalid_sale_inputs(ledger_service, stocked_store, shop_id, kwargs):
    values = {"flowers_sold": 1, "rate": "10", "cash_received": "0"}
    values.update(kwargs)

    with pytest.raises(ValidationError):
        ledger_service.record_sale(shop_id, **values)
    assert stocked_store.list_transactions() == []
    assert stocked_store.available_stock == 1000


def test_edit_transaction_recomputes_balances(ledger_service, shop_id):
    first = ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(1))
    ledger_service.record_sale(shop_id, 5, "40", "200", date=_day(2))

    ledger_service.edit_transaction(first.id, cash_received="400")

    balances = [t.outstanding_balance for t in ledger_service.shop_transactions(shop_id)]
    assert balances == [Decimal("0"), Decimal("0")]
    assert ledger_service.balance_of(shop_id) == Decimal("0")


def test_edit_transaction_date_reorders(ledger_service, shop_id):
    first = ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(1))
    second = ledger_service.record_sale(shop_id, 5, "40", "200", date=_day(2))

    ledger_service.edit_transaction(first.id, date=_day(3))

    ordered = ledger_service.shop_transactions(shop_id)
    assert [t.id for t in ordered] == [second.id, first.id]
    assert [t.outstanding_balance for t in ordered] == [Decimal("0"), Decimal("400")]


def test_edit_adjusts_stock_by_delta(ledger_service, stocked_store, shop_id):
    txn = ledger_service.record_sale(shop_id, 100, "4", "0")
    assert stocked_store.available_stock == 900

    ledger_service.edit_transaction(txn.id, flowers_sold=60, replaced_flowers=5)

    assert stocked_store.available_stock == 1000 - 60 + 5


def test_edit_with_replaced_flowers_when_stock_low(ledger_service, stocked_store, shop_id):
    stocked_store.available_stock = 10
    txn = ledger_service.record_sale(shop_id, 10, "40", "0", replaced_flowers=2)
    ledger_service.record_sale(shop_id, 2, "40", "0")
    assert stocked_store.available_stock == 0

    edited = ledger_service.edit_transaction(txn.id, cash_received="100")

    assert edited.cash_received == Decimal("100")
    assert stocked_store.available_stock == 0

    ledger_service.edit_transaction(txn.id, flowers_sold=12, replaced_flowers=4)
    assert stocked_store.available_stock == 0


def test_edit_rejected_when_stock_short(ledger_service, stocked_store, shop_id):
    txn = ledger_service.record_sale(shop_id, 100, "4", "0")
    stocked_store.available_stock = 10

    with pytest.raises(InsufficientStockError):
        ledger_service.edit_transaction(txn.id, flowers_sold=200)

    assert stocked_store.get_transaction(txn.id).flowers_sold == 100
    assert stocked_store.available_stock == 10


def test_edit_unknown_transaction(ledger_service):
    with pytest.raises(NotFoundError):
        ledger_service.edit_transaction("nope", cash_received="1")


def test_ledger_invariant_after_mixed_operations(ledger_service, shop_service, shop_id):
    other = shop_service.add_shop(name="Anbu", owner="A", phone="1", address="B")
    ids = []
    for day, sold, cash, target in [
        (5, 10, "100", shop_id),
        (2, 20, "0", other.id),
        (3, 7, "20", shop_id),
        (1, 3, "5", shop_id),
        (4, 12, "300", other.id),
    ]:
        ids.append(ledger_service.record_sale(target, sold, "12.5", cash, date=_day(day)).id)
    ledger_service.edit_transaction(ids[0], date=_day(2), rate="11")
    ledger_service.edit_transaction(ids[3], cash_received="0")

    for sid in (shop_id, other.id):
        transactions = ledger_service.shop_transactions(sid)
        assert [t.outstanding_balance for t in transactions] == _fold(transactions)
    assert ledger_service.verify_ledger() == []


def test_balance_of_shop_without_sales(ledger_service, sample_shop):
    assert ledger_service.balance_of(sample_shop.id) == Decimal("0")
    assert ledger_service.balance_of(sample_shop.id) == Decimal("0")


def test_backdated_sale_previous_balance(ledger_service, shop_id):
    ledger_service.record_sale(shop_id, 10, "40", "0", date=_day(5))

    txn = ledger_service.record_sale(shop_id, 1, "40", "0", date=_day(1))

    assert txn.previous_balance == Decimal("0")
    assert txn.outstanding_balance == Decimal("40")
    assert ledger_service.balance_of(shop_id) == Decimal("440")


def test_outstanding_totals(ledger_service, shop_service, shop_id):
    other = shop_service.add_shop(name="Anbu", owner="A", phone="1", address="B")
    paid_up = shop_service.add_shop(name="Kumar", owner="K", phone="2", address="C")
    ledger_service.record_sale(shop_id, 10, "40", "100")
    ledger_service.record_sale(other.id, 10, "40", "0")
    ledger_service.record_sale(paid_up.id, 10, "40", "400")

    assert ledger_service.total_outstanding() == Decimal("700")
    owing = ledger_service.shops_with_outstanding()
    assert [(shop.id, balance) for shop, balance in owing] == [
        (other.id, Decimal("400")),
        (shop_id, Decimal("300")),
    ]


def test_last_sale_rate(ledger_service, shop_id):
    assert ledger_service.last_sale_rate(shop_id) is None
    ledger_service.record_sale(shop_id, 1, "4.50", "0", date=_day(2))
    ledger_service.record_sale(shop_id, 1, "3", "0", date=_day(1))

    assert ledger_service.last_sale_rate(shop_id) == Decimal("4.50")


def test_concurrent_sales_keep_ledger_consistent(ledger_service, stocked_store, shop_id):
    def sell():
        for _ in range(20):
            ledger_service.record_sale(shop_id, 1, "10", "3")

    threads = [threading.Thread(target=sell) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(stocked_store.shop_transactions(shop_id)) == 80
    assert stocked_store.available_stock == 920
    assert ledger_service.balance_of(shop_id) == Decimal("560")
    assert ledger_service.verify_ledger() == []
