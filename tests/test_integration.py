"""Integration tests for end-to-end workflows."""

from decimal import Decimal

from flowertrack.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: shop → stock → sales → edit → reports."""
    env = {"FLOWERTRACK_DB_PATH": temp_db.database_path}

    def run(*args):
        result = cli_runner.invoke(cli, list(args), env=env)
        assert result.exit_code == 0, result.output
        return result.output

    # Step 1: Create shop
    output = run("shop", "add", "Lakshmi Stores", "--owner", "Ravi", "--phone", "98",
                 "--address", "Main Road", "--contact", "Son=99")
    assert "Created shop 'Lakshmi Stores'" in output

    # Step 2: Receive stock and move some of it to hand
    run("stock", "add", "godown", "300", "--date", "2024-06-01")
    run("stock", "add", "available", "100", "--date", "2024-06-01")

    # Step 3: Record sales, one of them backdated
    output = run("sale", "Lakshmi Stores", "--sold", "10", "--rate", "40", "--cash", "0",
                 "--date", "2024-06-02")
    sale_id = output.splitlines()[0].split()[-1]
    run("sale", "Lakshmi Stores", "--sold", "5", "--cash", "0", "--date", "2024-06-03")
    run("sale", "Lakshmi Stores", "--sold", "10", "--cash", "400", "--date", "2024-06-01")

    store = temp_db.load_store()
    assert [t.outstanding_balance for t in store.list_transactions()] == [
        Decimal("0"), Decimal("400"), Decimal("600")
    ]

    # Step 4: Correct a sale
    run("transaction", "edit", sale_id, "--replaced", "3")
    store = temp_db.load_store()
    assert store.available_stock == 100 - 25 + 3

    # Step 5: Reports
    output = run("summary", "--start-date", "2024-06-01", "--end-date", "2024-06-03")
    assert "Summary (2024-06-01 to 2024-06-03)" in output
    assert "₹1,000.00" in output

    output = run("outstanding")
    assert "600.00" in output

    output = run("stock", "reconcile")
    assert "Stock counters match the logs." in output
