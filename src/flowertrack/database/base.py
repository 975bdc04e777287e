"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any

from flowertrack.database.mappers import document_to_store, store_to_document
from flowertrack.database.models import MAIN_RECORD_ID
from flowertrack.domain.store import EntityStore


class Database(ABC):
    """Abstract database interface for flowertrack.

    The whole entity store is persisted as one JSON document. Saving
    replaces the document, so the last writer wins.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def load_document(self, record_id: str = MAIN_RECORD_ID) -> Optional[dict[str, Any]]:
        """Get the snapshot document stored under ``record_id``, or None."""
        pass

    @abstractmethod
    def save_document(
        self, document: dict[str, Any], record_id: str = MAIN_RECORD_ID
    ) -> None:
        """Insert or replace the snapshot document stored under ``record_id``."""
        pass

    def load_store(self, record_id: str = MAIN_RECORD_ID) -> EntityStore:
        """Load the entity store, or an empty one if nothing was saved yet."""
        document = self.load_document(record_id)
        if document is None:
            return EntityStore()
        return document_to_store(document)

    def save_store(self, store: EntityStore, record_id: str = MAIN_RECORD_ID) -> None:
        """Persist the entity store."""
        with store.lock:
            document = store_to_document(store)
        self.save_document(document, record_id)
