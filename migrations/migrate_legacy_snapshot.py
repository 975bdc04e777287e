#!/usr/bin/env python3
"""Migration script to rewrite a legacy snapshot in the current document shape.

Older snapshots logged stock arrivals as ``farmMovements`` entries with a
``flowersAdded`` count and carried no opening stock counters. Loading such a
snapshot already copes with both; this script saves it back so that the
stored document has:
- ``stockMovements`` entries with a ``quantity``
- ``openingAvailableStock`` and ``openingGodownStock``
- freshly recomputed outstanding balances

Usage:
    python migrations/migrate_legacy_snapshot.py [--db-path PATH] [--record-id ID]
"""

import sys
from pathlib import Path

# Add src to path so we can import flowertrack modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flowertrack.database.factories import create_sqlite_database
from flowertrack.database.mappers import document_to_store, store_to_document
from flowertrack.database.models import MAIN_RECORD_ID

LEGACY_KEYS = ("farmMovements",)
CURRENT_KEYS = ("stockMovements", "openingAvailableStock", "openingGodownStock")


def needs_migration(document: dict) -> bool:
    """Check whether a snapshot still uses the legacy shape."""
    return any(key in document for key in LEGACY_KEYS) or not all(
        key in document for key in CURRENT_KEYS
    )


def migrate_database(database_path: str | None = None, record_id: str = MAIN_RECORD_ID) -> bool:
    """Rewrite the snapshot stored under ``record_id``.

    Args:
        database_path: Path to database file. If None, uses default location.
        record_id: Snapshot record to migrate

    Returns:
        True if the snapshot was rewritten, False if there was nothing to do
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        document = db.load_document(record_id)
        if document is None:
            print(f"No snapshot stored under '{record_id}'")
            return False
        if not needs_migration(document):
            print("Migration already applied: snapshot uses the current format")
            return False

        print("Starting migration: rewriting legacy snapshot...")
        store = document_to_store(document)
        db.save_document(store_to_document(store), record_id)
        print(f"  Stock movements: {len(store.list_stock_movements())}")
        print(f"  Opening stock in hand: {store.opening_available_stock}")
        print(f"  Opening godown stock: {store.opening_godown_stock}")
        print("Migration completed successfully!")
        return True
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Rewrite a legacy flowertrack snapshot in the current format"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides FLOWERTRACK_DB_PATH environment variable)",
    )
    parser.add_argument(
        "--record-id",
        default=MAIN_RECORD_ID,
        help=f"Snapshot record to migrate (default: {MAIN_RECORD_ID})",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path, record_id=args.record_id)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
