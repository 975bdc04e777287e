"""Tests for domain entities."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal

from flowertrack.domain.entities import (
    Shop,
    ShopContact,
    StockReconciliation,
    Transaction,
    ValueRange,
)


class TestShop:
    """Tests for Shop entity."""

    def test_create_shop(self):
        shop = Shop(
            id="1",
            name="Lakshmi Stores",
            owner="Ravi",
            phone="98",
            address="Main Road",
            alternate_contacts=(ShopContact(label="Son", phone="99"),),
        )
        assert shop.alternate_contacts[0].label == "Son"
        assert shop.location is None

    def test_shop_immutability(self):
        shop = Shop(id="1", name="A", owner="B", phone="1", address="C")
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            shop.name = "New Name"


class TestTransaction:
    """Tests for Transaction entity."""

    def test_amount_and_balance_change(self):
        txn = Transaction(
            id="t1",
            shop_id="1",
            date=datetime(2024, 6, 1, tzinfo=UTC),
            flowers_sold=10,
            rate=Decimal("40"),
            cash_received=Decimal("150"),
            replaced_flowers=2,
        )
        assert txn.amount == Decimal("400")
        assert txn.balance_change == Decimal("250")
        assert txn.outstanding_balance == Decimal("0")

    def test_replaced_flowers_are_not_charged(self):
        txn = Transaction(
            id="t1",
            shop_id="1",
            date=datetime(2024, 6, 1, tzinfo=UTC),
            flowers_sold=0,
            rate=Decimal("40"),
            cash_received=Decimal("0"),
            replaced_flowers=5,
        )
        assert txn.amount == Decimal("0")

    def test_previous_balance(self):
        txn = Transaction(
            id="t1",
            shop_id="1",
            date=datetime(2024, 6, 1, tzinfo=UTC),
            flowers_sold=10,
            rate=Decimal("40"),
            cash_received=Decimal("100"),
            outstanding_balance=Decimal("500"),
        )
        assert txn.previous_balance == Decimal("200")


def test_value_range_is_inclusive_and_open_ended():
    bounded = ValueRange(Decimal("10"), Decimal("20"))
    assert bounded.contains(Decimal("10"))
    assert bounded.contains(Decimal("20"))
    assert not bounded.contains(Decimal("20.01"))
    assert ValueRange(minimum=Decimal("5")).contains(Decimal("1000"))
    assert not ValueRange(maximum=Decimal("5")).contains(Decimal("6"))


def test_stock_reconciliation_in_balance():
    assert StockReconciliation(10, 5, 10, 5).in_balance
    assert not StockReconciliation(10, 5, 9, 5).in_balance
