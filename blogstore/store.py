"""
Document store accessor.

One interface (get_many / get_one / add_one / set_one / update_one /
delete_one / get_page) over whichever backend was selected at startup.

Failure policy:
- Reads never raise for storage problems. They log a warning and return an
  empty result, or the local fallback's answer when one is configured.
- Writes always raise when the write cannot be made durable.
- Bad arguments raise InvalidArgument on both paths.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from .collections import (
    Collection,
    MENU_ID,
    SETTINGS_ID,
    SINGLETON_FILES,
    normalize_menu,
    singleton_default,
)
from .config import BACKEND_LOCAL, Config, get_config
from .exceptions import BlogStoreError, InvalidArgument, PersistenceFailure
from .logger import get_logger
from .persistence import DocumentBackend, JSONFileBackend, OfflineBackend, PostgresBackend
from .query import Query, apply_query, page_bounds, total_pages, validate_page

logger = get_logger(__name__)

T = TypeVar("T")


def new_record_id() -> str:
    """Random 128-bit id for a new record."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Page:
    """One page of a filtered/sorted collection."""
    records: List[dict] = field(default_factory=list)
    total_pages: int = 0
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": self.records,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "page": self.page,
            "pageSize": self.page_size,
        }


def _payload(data: Any) -> dict:
    if not isinstance(data, Mapping):
        raise InvalidArgument("Record data must be a mapping", argument="data", value=type(data).__name__)
    payload = dict(data)
    payload.pop("id", None)
    return payload


class DocumentStore:
    """
    Accessor over named collections.

    Built once per process by open_store() and passed to callers; the
    backend choice does not change afterwards.
    """

    def __init__(self, backend: DocumentBackend, fallback: Optional[DocumentBackend] = None):
        """
        Args:
            backend: Primary backend serving reads and writes
            fallback: Backend consulted for reads only, when the primary fails
        """
        self.backend = backend
        self.fallback = fallback

    @property
    def mode(self) -> str:
        return self.backend.name

    @property
    def is_connected(self) -> bool:
        return not isinstance(self.backend, OfflineBackend)

    def close(self) -> None:
        self.backend.close()
        if self.fallback is not None:
            self.fallback.close()

    # ---------------------- Policy ----------------------

    def _read_or_degrade(
        self,
        action: str,
        collection: Collection,
        read: Callable[[DocumentBackend], T],
        default: T
    ) -> T:
        try:
            return read(self.backend)
        except InvalidArgument:
            raise
        except Exception as e:
            logger.warning(f"{action} on '{collection.value}' failed on {self.backend.name} backend: {e}")

        if self.fallback is not None:
            try:
                result = read(self.fallback)
                logger.info(f"{action} on '{collection.value}' served from {self.fallback.name} fallback")
                return result
            except InvalidArgument:
                raise
            except Exception as e:
                logger.warning(f"{action} on '{collection.value}' failed on {self.fallback.name} fallback: {e}")

        return default

    def _write_or_fail(
        self,
        action: str,
        collection: Collection,
        write: Callable[[DocumentBackend], T]
    ) -> T:
        try:
            return write(self.backend)
        except BlogStoreError as e:
            logger.error(f"{action} on '{collection.value}' failed: {e}")
            raise
        except Exception as e:
            logger.error(f"{action} on '{collection.value}' failed: {e}", exc_info=True)
            raise PersistenceFailure(
                f"{action} failed: {e}", collection=collection.value, operation="write"
            ) from e

    def _require(self, name, action: str, allow_site_data: bool = True) -> Collection:
        collection = Collection.resolve(name)
        if collection is None:
            raise InvalidArgument(f"{action}: unknown collection '{name}'", argument="collection", value=name)
        if not allow_site_data and not collection.is_array:
            raise InvalidArgument(
                f"{action} is not supported on '{collection.value}'; use set_one/update_one "
                f"with '{MENU_ID}' or '{SETTINGS_ID}'",
                argument="collection", value=collection.value,
            )
        return collection

    @staticmethod
    def _singleton_id(record_id: Any) -> str:
        doc_id = str(record_id)
        if doc_id not in SINGLETON_FILES:
            raise InvalidArgument(
                f"site-data only holds '{MENU_ID}' and '{SETTINGS_ID}'",
                argument="record_id", value=doc_id,
            )
        return doc_id

    # ---------------------- Site-data helpers ----------------------

    @staticmethod
    def _load_singleton(backend: DocumentBackend, doc_id: str) -> dict:
        raw = backend.get_singleton(doc_id)
        if doc_id == MENU_ID:
            return normalize_menu(raw)
        if isinstance(raw, dict):
            doc = dict(raw)
            doc.pop("id", None)
            return doc
        return singleton_default(doc_id)

    def _site_documents(self, backend: DocumentBackend) -> List[dict]:
        return [
            {"id": doc_id, **self._load_singleton(backend, doc_id)}
            for doc_id in SINGLETON_FILES
        ]

    # ---------------------- Reads ----------------------

    def get_many(self, collection, filters=None, sort=None, limit: Optional[int] = None) -> List[dict]:
        """
        Records of a collection, filtered (AND), sorted and capped.

        Args:
            collection: Collection name or member
            filters: (field, op, value) tuples; op is "==", "!=" or "in"
            sort: (field, "asc" | "desc") or a field name
            limit: Maximum number of records (None or 0 for all)

        Returns:
            Matching records; empty when the collection is unknown or storage
            is degraded
        """
        query = Query.build(filters, sort, limit)
        resolved = Collection.resolve(collection)
        if resolved is None:
            logger.warning(f"get_many: no mapping for collection '{collection}'")
            return []

        if not resolved.is_array:
            return self._read_or_degrade(
                "get_many", resolved,
                lambda b: apply_query(self._site_documents(b), query), [],
            )
        return self._read_or_degrade("get_many", resolved, lambda b: b.find(resolved, query), [])

    def get_one(self, collection, record_id) -> Optional[dict]:
        """
        Single record by id, None when absent.

        site-data is special: "menu" returns {"data": [...]} and "settings"
        returns the settings object; neither is ever None.
        """
        resolved = Collection.resolve(collection)
        if resolved is None:
            logger.warning(f"get_one: no mapping for collection '{collection}'")
            return None
        record_id = str(record_id)

        if not resolved.is_array:
            if record_id not in SINGLETON_FILES:
                return None
            return self._read_or_degrade(
                "get_one", resolved,
                lambda b: self._load_singleton(b, record_id),
                singleton_default(record_id),
            )
        return self._read_or_degrade("get_one", resolved, lambda b: b.get(resolved, record_id), None)

    def get_page(self, collection, page: int, page_size: int, filters=None, sort=None) -> Page:
        """
        1-indexed page of the filtered/sorted collection.

        Raises:
            InvalidArgument: page_size <= 0 or page < 1
        """
        validate_page(page, page_size)
        query = Query.build(filters, sort)
        empty = Page(records=[], total_pages=0, total_count=0, page=page, page_size=page_size)

        resolved = Collection.resolve(collection)
        if resolved is None:
            logger.warning(f"get_page: no mapping for collection '{collection}'")
            return empty

        if resolved.is_array:
            def read(b: DocumentBackend):
                return b.page(resolved, query, page, page_size)
        else:
            def read(b: DocumentBackend):
                docs = apply_query(self._site_documents(b), query)
                start, end = page_bounds(page, page_size)
                return docs[start:end], len(docs)

        records, total = self._read_or_degrade("get_page", resolved, read, ([], 0))
        return Page(
            records=records,
            total_pages=total_pages(total, page_size),
            total_count=total,
            page=page,
            page_size=page_size,
        )

    # ---------------------- Writes ----------------------

    def add_one(self, collection, data: Mapping) -> str:
        """
        Insert a record under a freshly generated id.

        Returns:
            The new id

        Raises:
            InvalidArgument: unknown collection or site-data
            StorageUnavailable: remote store not connected
            PersistenceFailure: the write itself failed
        """
        resolved = self._require(collection, "add_one", allow_site_data=False)
        record = _payload(data)
        record["id"] = new_record_id()

        self._write_or_fail("add_one", resolved, lambda b: b.insert(resolved, record))
        logger.info(f"Added {resolved.value}/{record['id']}")
        return record["id"]

    def set_one(self, collection, record_id, data: Mapping) -> None:
        """Replace (or create) the record with the given id."""
        resolved = self._require(collection, "set_one")
        payload = _payload(data)

        if not resolved.is_array:
            doc_id = self._singleton_id(record_id)
            doc = normalize_menu(payload) if doc_id == MENU_ID else payload
            self._write_or_fail("set_one", resolved, lambda b: b.set_singleton(doc_id, doc))
        else:
            record = {**payload, "id": str(record_id)}
            self._write_or_fail("set_one", resolved, lambda b: b.replace(resolved, str(record_id), record))
        logger.info(f"Set {resolved.value}/{record_id}")

    def update_one(self, collection, record_id, partial: Mapping) -> dict:
        """
        Shallow-merge partial into an existing record.

        Returns:
            The merged record

        Raises:
            RecordNotFound: no record with that id (site-data singletons
                always exist)
        """
        resolved = self._require(collection, "update_one")
        payload = _payload(partial)

        if not resolved.is_array:
            doc_id = self._singleton_id(record_id)
            merged = self._write_or_fail(
                "update_one", resolved, lambda b: b.update_singleton(doc_id, payload)
            )
        else:
            merged = self._write_or_fail(
                "update_one", resolved, lambda b: b.update(resolved, str(record_id), payload)
            )
        logger.info(f"Updated {resolved.value}/{record_id}")
        return merged

    def delete_one(self, collection, record_id) -> bool:
        """
        Delete a record.

        Returns:
            True if a record was removed, False if none had that id
        """
        resolved = self._require(collection, "delete_one", allow_site_data=False)
        removed = self._write_or_fail("delete_one", resolved, lambda b: b.delete(resolved, str(record_id)))
        if removed:
            logger.info(f"Deleted {resolved.value}/{record_id}")
        else:
            logger.debug(f"delete_one: {resolved.value}/{record_id} not found")
        return removed


def open_store(config: Optional[Config] = None) -> DocumentStore:
    """
    Select the backend once and build the store.

    Local mode uses JSON files. Remote mode connects to PostgreSQL; if the
    credentials are missing or the connection fails, the store runs with an
    offline backend (reads degrade, writes raise StorageUnavailable).
    """
    config = config or get_config()
    local = JSONFileBackend(config.data_dir)

    if config.storage.backend == BACKEND_LOCAL:
        logger.info(f"Using local JSON storage at {config.data_dir}")
        return DocumentStore(local)

    fallback = local if config.storage.read_fallback else None

    if not config.db.is_configured:
        logger.warning("Remote storage selected but DB_HOST/DB_NAME/DB_USER are not set; running offline")
        return DocumentStore(OfflineBackend("database credentials are not configured"), fallback=fallback)

    backend = PostgresBackend(config.db)
    try:
        backend.init_db()
    except BlogStoreError as e:
        logger.warning(f"Could not connect to remote document store, running offline: {e}")
        backend.close()
        return DocumentStore(OfflineBackend(str(e)), fallback=fallback)

    logger.info("Using remote document store")
    return DocumentStore(backend, fallback=fallback)


# Process-wide store (lazily opened)
_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    """Get the process-wide store, opening it on first use."""
    global _store
    if _store is None:
        _store = open_store()
    return _store


def reset_store() -> None:
    """Close and forget the process-wide store (useful for testing)."""
    global _store
    if _store is not None:
        _store.close()
    _store = None
