"""Shared pytest fixtures for flowertrack tests."""

import tempfile
import os
import pytest

from flowertrack.database.factories import create_sqlite_database
from flowertrack.domain.inventory import InventoryService
from flowertrack.domain.ledger import LedgerService
from flowertrack.domain.shop import ShopService
from flowertrack.domain.store import EntityStore
from flowertrack.domain.summary import SummaryService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def store():
    """Create an empty entity store."""
    return EntityStore()


@pytest.fixture
def shop_service(store):
    return ShopService(store)


@pytest.fixture
def ledger_service(store):
    return LedgerService(store)


@pytest.fixture
def inventory_service(store):
    return InventoryService(store)


@pytest.fixture
def summary_service(store):
    return SummaryService(store)


@pytest.fixture
def sample_shop(shop_service):
    """Create a sample shop for testing."""
    return shop_service.add_shop(
        name="Lakshmi Stores",
        owner="Ravi",
        phone="9876543210",
        address="12 Main Road",
    )


@pytest.fixture
def stocked_store(store):
    """Give the store stock in hand to sell from."""
    store.available_stock = 1000
    store.opening_available_stock = 1000
    return store


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
