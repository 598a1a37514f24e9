"""
Data persistence layer.

Provides the abstract backend interface and concrete implementations
for local JSON files and a remote PostgreSQL document table.
"""

from .base import DocumentBackend, OfflineBackend
from .json_store import JSONFileBackend
from .postgres import PostgresBackend

__all__ = [
    "DocumentBackend",
    "OfflineBackend",
    "JSONFileBackend",
    "PostgresBackend",
]
