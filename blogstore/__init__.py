"""
blogstore: document store for the blog platform.

Posts, menu, hero slides, ads, social links and site settings kept in named
collections, served from local JSON files or a remote PostgreSQL document
table behind one accessor.

Usage:
    from blogstore import get_store
    store = get_store()
    posts = store.get_many("posts", filters=[("status", "==", "published")],
                           sort=("date", "desc"), limit=4)
"""

from .collections import Collection
from .exceptions import (
    BlogStoreError,
    ConfigurationError,
    InvalidArgument,
    PersistenceFailure,
    RecordNotFound,
    StorageUnavailable,
)
from .store import DocumentStore, Page, open_store, get_store, reset_store

__version__ = "0.1.0"

__all__ = [
    "Collection",
    "DocumentStore",
    "Page",
    "open_store",
    "get_store",
    "reset_store",
    "BlogStoreError",
    "ConfigurationError",
    "InvalidArgument",
    "PersistenceFailure",
    "RecordNotFound",
    "StorageUnavailable",
]
