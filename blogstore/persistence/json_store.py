"""
JSON file-based storage implementation.

Stores each array collection as one JSON array file, and the two site-data
singletons as separate JSON object files:
- <data_dir>/posts.json, socialLinks.json, heroSlides.json, ads.json
- <data_dir>/menu.json ({"data": [...]} or a bare array)
- <data_dir>/site-settings.json

Writes replace the whole file. Concurrent writers in one process are
serialized per file; writers in different processes can still lose updates.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Optional, List, Any, Tuple

from ..collections import Collection, SINGLETON_FILES, singleton_default
from ..exceptions import PersistenceFailure, RecordNotFound
from ..logger import get_logger
from ..query import Query, apply_query, page_bounds
from .base import DocumentBackend

logger = get_logger(__name__)


def _same_id(record: dict, record_id: str) -> bool:
    # Older files may hold numeric ids
    return str(record.get("id")) == str(record_id)


class JSONFileBackend(DocumentBackend):
    """Local JSON file backend."""

    name = "local"

    def __init__(self, data_dir: Path):
        """
        Initialize JSON store.

        Args:
            data_dir: Directory holding the collection files
        """
        self.data_dir = Path(data_dir)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock(self, file_name: str) -> threading.Lock:
        with self._locks_guard:
            if file_name not in self._locks:
                self._locks[file_name] = threading.Lock()
            return self._locks[file_name]

    def _collection_path(self, collection: Collection) -> Path:
        return self.data_dir / collection.file_name

    def _singleton_path(self, doc_id: str) -> Path:
        return self.data_dir / SINGLETON_FILES[doc_id]

    # ---------------------- File I/O ----------------------

    def _read_json(self, path: Path, label: str) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise PersistenceFailure(
                f"Invalid JSON in {path.name}: {e}",
                collection=label, file_path=str(path), operation="read",
            ) from e
        except OSError as e:
            raise PersistenceFailure(
                f"Could not read {path.name}: {e}",
                collection=label, file_path=str(path), operation="read",
            ) from e

    def _write_json(self, path: Path, data: Any, label: str) -> None:
        """Write to a temp file and rename it over the target."""
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(data, ensure_ascii=False, indent=2),
                encoding="utf-8"
            )
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(
                f"Could not write {path.name}: {e}",
                collection=label, file_path=str(path), operation="write",
            ) from e

    def _create_empty(self, collection: Collection, path: Path) -> None:
        try:
            self._write_json(path, [], collection.value)
        except PersistenceFailure as e:
            logger.debug(f"Could not create {path}: {e}")

    def _load_array(self, collection: Collection, locked: bool = False) -> List[dict]:
        """
        Load a collection, creating an empty file if it does not exist yet.

        Args:
            collection: Array collection to load
            locked: Caller already holds the collection's file lock
        """
        path = self._collection_path(collection)

        if not path.exists():
            if locked:
                self._create_empty(collection, path)
            else:
                with self._lock(collection.file_name):
                    # A writer may have created it while we waited
                    if not path.exists():
                        self._create_empty(collection, path)
            if not path.exists():
                return []

        data = self._read_json(path, collection.value)
        if not isinstance(data, list):
            raise PersistenceFailure(
                f"{path.name} does not hold a JSON array",
                collection=collection.value, file_path=str(path), operation="read",
            )
        return [r for r in data if isinstance(r, dict)]

    def _save_array(self, collection: Collection, records: List[dict]) -> None:
        self._write_json(self._collection_path(collection), records, collection.value)

    # ---------------------- Reads ----------------------

    def find(self, collection: Collection, query: Query) -> List[dict]:
        return apply_query(self._load_array(collection), query)

    def page(
        self,
        collection: Collection,
        query: Query,
        page: int,
        page_size: int
    ) -> Tuple[List[dict], int]:
        records = apply_query(self._load_array(collection), query.without_limit())
        start, end = page_bounds(page, page_size)
        return records[start:end], len(records)

    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        for record in self._load_array(collection):
            if _same_id(record, record_id):
                return record
        return None

    # ---------------------- Writes ----------------------

    def insert(self, collection: Collection, record: dict) -> None:
        with self._lock(collection.file_name):
            records = self._load_array(collection, locked=True)
            records.append(record)
            self._save_array(collection, records)

    def replace(self, collection: Collection, record_id: str, record: dict) -> None:
        with self._lock(collection.file_name):
            records = self._load_array(collection, locked=True)
            for i, existing in enumerate(records):
                if _same_id(existing, record_id):
                    records[i] = record
                    break
            else:
                records.append(record)
            self._save_array(collection, records)

    def update(self, collection: Collection, record_id: str, partial: dict) -> dict:
        with self._lock(collection.file_name):
            records = self._load_array(collection, locked=True)
            for i, existing in enumerate(records):
                if _same_id(existing, record_id):
                    merged = {**existing, **partial}
                    records[i] = merged
                    self._save_array(collection, records)
                    return merged
        raise RecordNotFound(collection.value, record_id)

    def delete(self, collection: Collection, record_id: str) -> bool:
        with self._lock(collection.file_name):
            records = self._load_array(collection, locked=True)
            remaining = [r for r in records if not _same_id(r, record_id)]
            if len(remaining) == len(records):
                return False
            self._save_array(collection, remaining)
            return True

    # ---------------------- Site-data singletons ----------------------

    def get_singleton(self, doc_id: str) -> Optional[Any]:
        path = self._singleton_path(doc_id)
        if not path.exists():
            return None
        return self._read_json(path, Collection.SITE_DATA.value)

    def set_singleton(self, doc_id: str, doc: dict) -> None:
        path = self._singleton_path(doc_id)
        with self._lock(path.name):
            self._write_json(path, doc, Collection.SITE_DATA.value)

    def update_singleton(self, doc_id: str, partial: dict) -> dict:
        path = self._singleton_path(doc_id)
        with self._lock(path.name):
            current = self.get_singleton(doc_id)
            if isinstance(current, list):
                current = {"data": current}
            if not isinstance(current, dict):
                current = singleton_default(doc_id)
            merged = {**current, **partial}
            self._write_json(path, merged, Collection.SITE_DATA.value)
            return merged
