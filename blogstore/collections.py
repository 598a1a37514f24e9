"""
Known collections and how each is laid out in storage.

Most collections are arrays of records keyed by ``id``. ``site-data`` is the
exception: it holds two singleton documents, ``menu`` and ``settings``,
persisted separately.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class CollectionKind(Enum):
    ARRAY = "array"
    SINGLETONS = "singletons"


class Collection(Enum):
    POSTS = "posts"
    SITE_DATA = "site-data"
    SOCIAL_LINKS = "socialLinks"
    HERO_SLIDES = "heroSlides"
    ADS = "ads"

    @property
    def kind(self) -> CollectionKind:
        if self is Collection.SITE_DATA:
            return CollectionKind.SINGLETONS
        return CollectionKind.ARRAY

    @property
    def is_array(self) -> bool:
        return self.kind is CollectionKind.ARRAY

    @property
    def file_name(self) -> str:
        """JSON file holding an array collection in local mode."""
        return f"{self.value}.json"

    @classmethod
    def resolve(cls, name) -> Optional["Collection"]:
        """Map a collection name (or member) to a Collection, None if unknown."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


# site-data singleton ids and their local file names
MENU_ID = "menu"
SETTINGS_ID = "settings"

SINGLETON_FILES = {
    MENU_ID: "menu.json",
    SETTINGS_ID: "site-settings.json",
}


def singleton_default(doc_id: str) -> dict:
    """Empty value of a site-data singleton."""
    if doc_id == MENU_ID:
        return {"data": []}
    return {}


def normalize_menu(raw) -> dict:
    """Menu is stored either as {"data": [...]} or as a bare array."""
    if isinstance(raw, list):
        return {"data": raw}
    if isinstance(raw, dict):
        doc = dict(raw)
        doc.pop("id", None)
        if not isinstance(doc.get("data"), list):
            doc["data"] = []
        return doc
    return {"data": []}
