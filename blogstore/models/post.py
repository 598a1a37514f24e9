"""
Post model.

Represents a blog post as stored in the ``posts`` collection. Field names
follow the stored JSON keys (camelCase) so records round-trip unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional, Any, List

STATUS_PUBLISHED = "published"
STATUS_DRAFT = "draft"
STATUS_SCHEDULED = "scheduled"
POST_STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT, STATUS_SCHEDULED)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Post:
    """
    A blog post.

    ``category`` is a path matching a menu href (e.g. "/fashion/mens-fashion")
    but is not validated against the menu. ``slug`` should be unique among
    published posts; nothing enforces it.
    """

    id: str = ""
    slug: str = ""
    title: str = ""
    content: str = ""  # HTML
    imageUrl: str = ""
    category: str = ""
    date: str = ""  # ISO 8601
    status: str = STATUS_DRAFT
    scheduledAt: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    views: int = 0
    seoTitle: str = ""
    seoDescription: str = ""
    dataAiHint: Optional[str] = None

    def __post_init__(self):
        self.slug = (self.slug or "").strip()
        self.tags = [t.strip() for t in (self.tags or []) if t and t.strip()]
        self.views = int(self.views or 0)

    @property
    def is_published(self) -> bool:
        return self.status == STATUS_PUBLISHED

    @property
    def href(self) -> str:
        """Public URL path; computed, never stored."""
        return f"/posts/{self.slug}"

    def to_dict(self) -> dict[str, Any]:
        """Stored form; optional fields left unset are omitted."""
        data = asdict(self)
        for key in ("scheduledAt", "dataAiHint"):
            if data[key] is None:
                del data[key]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Post":
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "id" in values:
            values["id"] = str(values["id"])
        return cls(**values)
