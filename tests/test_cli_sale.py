"""Tests for sale and transaction CLI commands."""

from decimal import Decimal

import pytest

from flowertrack.cli.main import cli


def _run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


@pytest.fixture
def stocked_db(cli_runner, temp_db):
    """Database with one shop and 100 flowers in hand."""
    for args in (
        ["shop", "add", "Lakshmi Stores", "--owner", "Ravi", "--phone", "98", "--address", "Road"],
        ["stock", "add", "godown", "500", "--date", "2024-06-01"],
        ["stock", "add", "available", "100", "--date", "2024-06-01"],
    ):
        result = _run(cli_runner, temp_db, *args)
        assert result.exit_code == 0, result.output
    return temp_db


def _sale_id(output):
    for line in output.splitlines():
        if line.startswith("Recorded sale "):
            return line.split()[-1]
    return None


def test_record_sale(cli_runner, stocked_db):
    result = _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "10", "--rate", "40",
        "--cash", "150", "--replaced", "2", "--date", "2024-06-02",
    )

    assert result.exit_code == 0, result.output
    assert "Total amount: ₹400.00" in result.output
    assert "Previous balance: ₹0.00" in result.output
    assert "New balance: ₹250.00" in result.output
    assert "Stock in hand: 92" in result.output

    store = stocked_db.load_store()
    assert store.available_stock == 92
    [txn] = store.list_transactions()
    assert txn.outstanding_balance == Decimal("250")


def test_backdated_sale_receipt(cli_runner, stocked_db):
    _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "10", "--rate", "40",
        "--cash", "0", "--date", "2024-06-05",
    )

    result = _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "1", "--rate", "40",
        "--cash", "0", "--date", "2024-06-01",
    )

    assert result.exit_code == 0, result.output
    assert "Previous balance: ₹0.00" in result.output
    assert "New balance: ₹40.00" in result.output
    assert "Shop balance: ₹440.00" in result.output


def test_sale_uses_last_rate(cli_runner, stocked_db):
    result = _run(cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "1", "--cash", "0")
    assert result.exit_code == 1
    assert "--rate is required" in result.output

    _run(cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "1", "--rate", "4.5", "--cash", "0")
    result = _run(cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "2", "--cash", "0")

    assert result.exit_code == 0, result.output
    assert "Rate: ₹4.5" in result.output
    assert "Total amount: ₹9.00" in result.output


def test_sale_rejected_without_stock(cli_runner, stocked_db):
    result = _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "101", "--rate", "4",
        "--cash", "0",
    )

    assert result.exit_code == 1
    assert "Not enough flowers in available stock" in result.output
    store = stocked_db.load_store()
    assert store.available_stock == 100
    assert store.list_transactions() == []


def test_sale_invalid_cash(cli_runner, stocked_db):
    result = _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "1", "--rate", "4",
        "--cash", "lots",
    )

    assert result.exit_code == 1
    assert "Cash received" in result.output


def test_backdated_sale_and_edit(cli_runner, stocked_db):
    first = _sale_id(_run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "10", "--rate", "40",
        "--cash", "0", "--date", "2024-06-02",
    ).output)
    _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "5", "--rate", "40",
        "--cash", "0", "--date", "2024-06-03",
    )
    _run(
        cli_runner, stocked_db, "sale", "Lakshmi Stores", "--sold", "10", "--rate", "40",
        "--cash", "0", "--date", "2024-06-01",
    )

    store = stocked_db.load_store()
    balances = [t.outstanding_balance for t in store.list_transactions()]
    assert balances == [Decimal("400"), Decimal("800"), Decimal("1000")]

    result = _run(cli_runner, stocked_db, "transaction", "edit", first, "--cash", "400", "--sold", "8")
    assert result.exit_code == 0, result.output
    assert f"Updated transaction {first}" in result.output
    assert "Shop balance: ₹520.00" in result.output

    store = stocked_db.load_store()
    assert store.available_stock == 100 - 23
    assert [t.outstanding_balance for t in store.list_transactions()] == [
        Decimal("400"), Decimal("320"), Decimal("520")
    ]


def test_edit_unknown_transaction(cli_runner, stocked_db):
    result = _run(cli_runner, stocked_db, "transaction", "edit", "123", "--cash", "1")

    assert result.exit_code == 1
    assert "Transaction 123 not found" in result.output
