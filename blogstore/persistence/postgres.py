"""
PostgreSQL document backend.

Every collection lives in one JSONB table keyed by (collection, id). Filters
become JSONB predicates, sorting orders on the JSONB field, and pages use
COUNT(*) plus OFFSET/LIMIT.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Optional, List, Tuple, Iterator

import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json

from ..collections import Collection, singleton_default
from ..config import DBConfig
from ..exceptions import PersistenceFailure, RecordNotFound, StorageUnavailable
from ..logger import get_logger
from ..query import Query, Filter, Sort, OP_EQ, OP_NE, page_bounds
from .base import DocumentBackend

logger = get_logger(__name__)

# Missing fields compare as JSON null, like a missing key in a local record
_FIELD = "COALESCE(data -> %s, 'null'::jsonb)"


def build_where(collection: str, filters: Tuple[Filter, ...]) -> Tuple[str, list]:
    """
    WHERE clause (without the keyword) and its parameters.

    Field names and values are always bound as parameters.
    """
    clauses = ["collection = %s"]
    params: list = [collection]

    for f in filters:
        if f.op == OP_EQ:
            clauses.append(f"{_FIELD} = %s::jsonb")
            params.extend([f.field, Json(f.value)])
        elif f.op == OP_NE:
            clauses.append(f"{_FIELD} <> %s::jsonb")
            params.extend([f.field, Json(f.value)])
        else:
            clauses.append(f"{_FIELD} IN (SELECT jsonb_array_elements(%s::jsonb))")
            params.extend([f.field, Json(list(f.value))])

    return " AND ".join(clauses), params


def build_order(sort: Optional[Sort]) -> Tuple[str, list]:
    """ORDER BY clause; insertion order breaks ties and applies when unsorted."""
    if sort is None:
        return " ORDER BY created_at, id", []
    if sort.descending:
        return " ORDER BY data -> %s DESC NULLS LAST, created_at, id", [sort.field]
    return " ORDER BY data -> %s ASC NULLS FIRST, created_at, id", [sort.field]


class PostgresBackend(DocumentBackend):
    """
    PostgreSQL backend storing records as JSONB documents.

    Handles:
    - Connection management (one lazily opened connection)
    - Schema initialization
    - Query translation
    """

    name = "remote"

    def __init__(self, config: DBConfig):
        """
        Initialize backend.

        Args:
            config: Database configuration
        """
        self.config = config
        self._conn = None
        self._table = sql.Identifier(config.schema, config.table)

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(
                host=self.config.host,
                port=self.config.port,
                dbname=self.config.name,
                user=self.config.user,
                password=self.config.password,
                sslmode=self.config.ssl_mode,
                connect_timeout=self.config.connect_timeout,
                options=f"-c statement_timeout={self.config.statement_timeout_ms}",
            )
            self._conn.autocommit = False
            logger.info(f"Connected to PostgreSQL at {self.config.host}:{self.config.port}/{self.config.name}")
        return self._conn

    @contextmanager
    def _cursor(self, label: str, collection: str) -> Iterator:
        """
        Cursor inside a transaction; commits on success, rolls back on error.

        psycopg2 errors are translated: connection and timeout problems become
        StorageUnavailable, anything else PersistenceFailure.
        """
        conn = None
        start = time.perf_counter()
        try:
            conn = self._get_connection()
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except psycopg2.Error as e:
            if conn is not None and not conn.closed:
                try:
                    conn.rollback()
                except psycopg2.Error:
                    logger.debug("Rollback failed; connection will be reopened")
                    conn.close()
            if isinstance(e, (psycopg2.OperationalError, psycopg2.InterfaceError)):
                raise StorageUnavailable(collection=collection, reason=str(e).strip()) from e
            raise PersistenceFailure(
                f"{label} failed: {str(e).strip()}",
                collection=collection, operation=label,
            ) from e
        except Exception:
            if conn is not None and not conn.closed:
                conn.rollback()
            raise
        finally:
            logger.debug(f"{label} {collection}: {(time.perf_counter() - start) * 1000:.1f}ms")

    def _statement(self, template: str) -> sql.Composed:
        return sql.SQL(template).format(table=self._table)

    def init_db(self) -> None:
        """Initialize database schema."""
        with self._cursor("init", "*") as cur:
            cur.execute(self._statement("""
                CREATE TABLE IF NOT EXISTS {table} (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data JSONB NOT NULL DEFAULT '{{}}',
                    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (collection, id)
                );
            """))
        logger.info("Database schema initialized")

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    # ---------------------- Reads ----------------------

    def find(self, collection: Collection, query: Query) -> List[dict]:
        where, params = build_where(collection.value, query.filters)
        order, order_params = build_order(query.sort)
        statement = "SELECT data FROM {table} WHERE " + where + order
        params = params + order_params
        if query.limit:
            statement += " LIMIT %s"
            params.append(query.limit)

        with self._cursor("find", collection.value) as cur:
            cur.execute(self._statement(statement), params)
            return [row[0] for row in cur.fetchall()]

    def page(
        self,
        collection: Collection,
        query: Query,
        page: int,
        page_size: int
    ) -> Tuple[List[dict], int]:
        where, params = build_where(collection.value, query.filters)
        order, order_params = build_order(query.sort)
        offset, _ = page_bounds(page, page_size)

        with self._cursor("page", collection.value) as cur:
            cur.execute(self._statement("SELECT COUNT(*) FROM {table} WHERE " + where), params)
            total = cur.fetchone()[0]
            if offset >= total:
                return [], total
            cur.execute(
                self._statement("SELECT data FROM {table} WHERE " + where + order + " LIMIT %s OFFSET %s"),
                params + order_params + [page_size, offset],
            )
            return [row[0] for row in cur.fetchall()], total

    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        with self._cursor("get", collection.value) as cur:
            cur.execute(
                self._statement("SELECT data FROM {table} WHERE collection = %s AND id = %s"),
                (collection.value, str(record_id)),
            )
            row = cur.fetchone()
        return row[0] if row else None

    # ---------------------- Writes ----------------------

    def insert(self, collection: Collection, record: dict) -> None:
        with self._cursor("insert", collection.value) as cur:
            cur.execute(
                self._statement("INSERT INTO {table} (collection, id, data) VALUES (%s, %s, %s)"),
                (collection.value, str(record["id"]), Json(record)),
            )

    def replace(self, collection: Collection, record_id: str, record: dict) -> None:
        with self._cursor("replace", collection.value) as cur:
            self._upsert(cur, collection.value, str(record_id), record)

    def _upsert(self, cur, collection: str, record_id: str, doc: dict) -> None:
        cur.execute(
            self._statement("""
                INSERT INTO {table} (collection, id, data) VALUES (%s, %s, %s)
                ON CONFLICT (collection, id)
                DO UPDATE SET data = EXCLUDED.data, updated_at = CURRENT_TIMESTAMP
            """),
            (collection, record_id, Json(doc)),
        )

    def update(self, collection: Collection, record_id: str, partial: dict) -> dict:
        with self._cursor("update", collection.value) as cur:
            # jsonb || jsonb is a shallow merge, right side wins
            cur.execute(
                self._statement("""
                    UPDATE {table} SET data = data || %s, updated_at = CURRENT_TIMESTAMP
                    WHERE collection = %s AND id = %s
                    RETURNING data
                """),
                (Json(partial), collection.value, str(record_id)),
            )
            row = cur.fetchone()
        if row is None:
            raise RecordNotFound(collection.value, str(record_id))
        return row[0]

    def delete(self, collection: Collection, record_id: str) -> bool:
        with self._cursor("delete", collection.value) as cur:
            cur.execute(
                self._statement("DELETE FROM {table} WHERE collection = %s AND id = %s"),
                (collection.value, str(record_id)),
            )
            return cur.rowcount > 0

    # ---------------------- Site-data singletons ----------------------

    def get_singleton(self, doc_id: str) -> Optional[dict]:
        return self.get(Collection.SITE_DATA, doc_id)

    def set_singleton(self, doc_id: str, doc: dict) -> None:
        with self._cursor("set", Collection.SITE_DATA.value) as cur:
            self._upsert(cur, Collection.SITE_DATA.value, doc_id, doc)

    def update_singleton(self, doc_id: str, partial: dict) -> dict:
        initial = {**singleton_default(doc_id), **partial}
        with self._cursor("update", Collection.SITE_DATA.value) as cur:
            cur.execute(
                self._statement("""
                    INSERT INTO {table} (collection, id, data) VALUES (%s, %s, %s)
                    ON CONFLICT (collection, id)
                    DO UPDATE SET data = {table}.data || %s, updated_at = CURRENT_TIMESTAMP
                    RETURNING data
                """),
                (Collection.SITE_DATA.value, doc_id, Json(initial), Json(partial)),
            )
            return cur.fetchone()[0]
