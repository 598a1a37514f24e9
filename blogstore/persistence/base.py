"""
Backend interface for document storage.

Defines the abstract interface every storage backend implements so the
accessor can be served from local JSON files or a remote database without
the caller noticing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple

from ..collections import Collection
from ..exceptions import StorageUnavailable
from ..query import Query


class DocumentBackend(ABC):
    """
    Abstract backend for collection storage.

    Array collections are addressed by record id. The two site-data
    singletons (menu, settings) have their own get/set/update methods
    because they are not stored as an array.
    """

    # Short name for logs ("local", "remote", "offline")
    name: str = "backend"

    @abstractmethod
    def find(self, collection: Collection, query: Query) -> List[dict]:
        """
        Records matching the query's filters, sorted and capped.

        Args:
            collection: Array collection to read
            query: Filters, sort and limit

        Returns:
            Matching records (empty list when none)
        """

    @abstractmethod
    def page(
        self,
        collection: Collection,
        query: Query,
        page: int,
        page_size: int
    ) -> Tuple[List[dict], int]:
        """
        One 1-indexed page of the filtered/sorted sequence.

        Returns:
            (records on the page, total matching count)
        """

    @abstractmethod
    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        """Record with the given id, None if absent."""

    @abstractmethod
    def insert(self, collection: Collection, record: dict) -> None:
        """Append a new record (which already carries its id)."""

    @abstractmethod
    def replace(self, collection: Collection, record_id: str, record: dict) -> None:
        """Replace the record with that id, creating it if absent."""

    @abstractmethod
    def update(self, collection: Collection, record_id: str, partial: dict) -> dict:
        """
        Shallow-merge partial into an existing record.

        Returns:
            The merged record

        Raises:
            RecordNotFound: no record with that id
        """

    @abstractmethod
    def delete(self, collection: Collection, record_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    def get_singleton(self, doc_id: str) -> Optional[dict]:
        """Raw site-data singleton, None if never stored."""

    @abstractmethod
    def set_singleton(self, doc_id: str, doc: dict) -> None:
        """Replace a site-data singleton."""

    @abstractmethod
    def update_singleton(self, doc_id: str, partial: dict) -> dict:
        """Shallow-merge into a site-data singleton (created if absent)."""

    def close(self) -> None:
        """Release any held resources."""


class OfflineBackend(DocumentBackend):
    """
    Stand-in for a remote backend that could not be reached at startup.

    Every call raises StorageUnavailable; the accessor turns that into an
    empty (or fallback) read and a loud write failure.
    """

    name = "offline"

    def __init__(self, reason: str = "remote store not connected"):
        self.reason = reason

    def _unavailable(self, collection=None):
        name = collection.value if isinstance(collection, Collection) else collection
        raise StorageUnavailable(collection=name, reason=self.reason)

    def find(self, collection, query):
        self._unavailable(collection)

    def page(self, collection, query, page, page_size):
        self._unavailable(collection)

    def get(self, collection, record_id):
        self._unavailable(collection)

    def insert(self, collection, record):
        self._unavailable(collection)

    def replace(self, collection, record_id, record):
        self._unavailable(collection)

    def update(self, collection, record_id, partial):
        self._unavailable(collection)

    def delete(self, collection, record_id):
        self._unavailable(collection)

    def get_singleton(self, doc_id):
        self._unavailable(Collection.SITE_DATA)

    def set_singleton(self, doc_id, doc):
        self._unavailable(Collection.SITE_DATA)

    def update_singleton(self, doc_id, partial):
        self._unavailable(Collection.SITE_DATA)
