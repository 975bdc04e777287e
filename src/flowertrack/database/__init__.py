"""Database layer for flowertrack application."""

from flowertrack.database.base import Database
from flowertrack.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
