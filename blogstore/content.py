"""
Content service.

Typed access to each collection plus the queries the public site and the
admin dashboard run (category listings, tags, search, related posts, views,
sitemap). Everything goes through the DocumentStore, so the read/write
failure policy applies unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, List, Any
from urllib.parse import quote

from .collections import Collection, MENU_ID, SETTINGS_ID
from .logger import get_logger
from .models import AdConfig, MenuItem, Post, SiteSettings, SlideConfig, SocialLink
from .models.menu import category_hrefs, category_paths, find_category, menu_from_data, menu_to_data
from .models.post import STATUS_DRAFT, STATUS_PUBLISHED, STATUS_SCHEDULED, utc_now_iso
from .models.site import STATUS_ACTIVE
from .store import DocumentStore, Page

logger = get_logger(__name__)

PUBLISHED = [("status", "==", STATUS_PUBLISHED)]
NEWEST_FIRST = ("date", "desc")

TOP_POSTS_COUNT = 3

STATIC_ROUTES = [
    ("", "yearly", 1.0),
    ("/about", "monthly", 0.8),
    ("/contact", "monthly", 0.5),
    ("/privacy", "yearly", 0.3),
    ("/terms", "yearly", 0.3),
    ("/all-posts", "weekly", 0.7),
]


@dataclass
class CategoryPosts:
    """Posts for a category page: most viewed first, then the rest by date."""
    category: MenuItem
    top_posts: List[Post] = field(default_factory=list)
    other_posts: List[Post] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.top_posts) + len(self.other_posts)


@dataclass
class DashboardStats:
    total_posts: int = 0
    published: int = 0
    drafts: int = 0
    scheduled: int = 0
    total_views: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_posts": self.total_posts,
            "published": self.published,
            "drafts": self.drafts,
            "scheduled": self.scheduled,
            "total_views": self.total_views,
        }


@dataclass
class SitemapEntry:
    url: str
    change_frequency: str
    priority: float
    last_modified: Optional[str] = None


class ContentService:
    """Typed accessors and site queries over a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------- Posts ----------------------

    def list_posts(self, status: Optional[str] = None, limit: Optional[int] = None) -> List[Post]:
        """Posts newest first, optionally restricted to one status."""
        filters = [("status", "==", status)] if status else None
        records = self.store.get_many(Collection.POSTS, filters=filters, sort=NEWEST_FIRST, limit=limit)
        return [Post.from_dict(r) for r in records]

    def get_post(self, post_id: str) -> Optional[Post]:
        record = self.store.get_one(Collection.POSTS, post_id)
        return Post.from_dict(record) if record else None

    def get_post_by_slug(self, slug: str) -> Optional[Post]:
        """Published post with this slug (first match if slugs collide)."""
        records = self.store.get_many(
            Collection.POSTS,
            filters=PUBLISHED + [("slug", "==", slug)],
            sort=NEWEST_FIRST,
            limit=1,
        )
        return Post.from_dict(records[0]) if records else None

    def save_post(self, post: Post) -> str:
        """
        Add a new post or update an existing one.

        New posts get the current time as ``date`` when none is set.

        Returns:
            The post id
        """
        data = post.to_dict()
        if post.id:
            self.store.update_one(Collection.POSTS, post.id, data)
            return post.id
        if not data.get("date"):
            data["date"] = utc_now_iso()
        post.id = self.store.add_one(Collection.POSTS, data)
        return post.id

    def delete_post(self, post_id: str) -> bool:
        return self.store.delete_one(Collection.POSTS, post_id)

    def published_page(self, page: int, page_size: int) -> Page:
        """One page of the all-posts listing."""
        return self.store.get_page(
            Collection.POSTS, page, page_size, filters=PUBLISHED, sort=NEWEST_FIRST
        )

    def posts_for_category(self, menu: List[MenuItem], path: str) -> Optional[CategoryPosts]:
        """
        Published posts for a category page.

        A parent category includes posts filed under any of its children.

        Returns:
            None if the path is not in the menu
        """
        category = find_category(menu, path)
        if category is None:
            return None

        records = self.store.get_many(
            Collection.POSTS,
            filters=PUBLISHED + [("category", "in", category_hrefs(category))],
            sort=NEWEST_FIRST,
        )
        posts = [Post.from_dict(r) for r in records]
        top = sorted(posts, key=lambda p: p.views, reverse=True)[:TOP_POSTS_COUNT]
        top_ids = {p.id for p in top}
        return CategoryPosts(
            category=category,
            top_posts=top,
            other_posts=[p for p in posts if p.id not in top_ids],
        )

    def posts_with_tag(self, tag: str) -> List[Post]:
        wanted = tag.strip().lower()
        return [
            p for p in self.list_posts(status=STATUS_PUBLISHED)
            if wanted in (t.lower() for t in p.tags)
        ]

    def search_posts(self, query: str) -> List[Post]:
        """Published posts whose title, tags or content contain the query."""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [
            p for p in self.list_posts(status=STATUS_PUBLISHED)
            if needle in p.title.lower()
            or needle in p.content.lower()
            or any(needle in t.lower() for t in p.tags)
        ]

    def related_posts(self, post: Post, limit: int = 3) -> List[Post]:
        if not post.category:
            return []
        records = self.store.get_many(
            Collection.POSTS,
            filters=PUBLISHED + [("category", "==", post.category), ("id", "!=", post.id)],
            sort=NEWEST_FIRST,
            limit=limit,
        )
        return [Post.from_dict(r) for r in records]

    def increment_views(self, post_id: str) -> int:
        """
        Bump a post's view counter.

        Read-then-write, so concurrent increments can be lost.
        """
        post = self.get_post(post_id)
        if post is None:
            logger.debug(f"increment_views: post {post_id} not found")
            return 0
        views = post.views + 1
        self.store.update_one(Collection.POSTS, post_id, {"views": views})
        return views

    def dashboard_stats(self) -> DashboardStats:
        posts = self.list_posts()
        return DashboardStats(
            total_posts=len(posts),
            published=sum(1 for p in posts if p.status == STATUS_PUBLISHED),
            drafts=sum(1 for p in posts if p.status == STATUS_DRAFT),
            scheduled=sum(1 for p in posts if p.status == STATUS_SCHEDULED),
            total_views=sum(p.views for p in posts),
        )

    # ---------------------- Site data ----------------------

    def get_menu(self) -> List[MenuItem]:
        doc = self.store.get_one(Collection.SITE_DATA, MENU_ID)
        return menu_from_data(doc["data"])

    def save_menu(self, items: List[MenuItem]) -> None:
        self.store.update_one(Collection.SITE_DATA, MENU_ID, {"data": menu_to_data(items)})

    def get_settings(self) -> SiteSettings:
        return SiteSettings.from_dict(self.store.get_one(Collection.SITE_DATA, SETTINGS_ID))

    def save_settings(self, settings: SiteSettings) -> None:
        self.store.set_one(Collection.SITE_DATA, SETTINGS_ID, settings.to_dict())

    # ---------------------- Social links, slides, ads ----------------------

    def list_social_links(self) -> List[SocialLink]:
        return [SocialLink.from_dict(r) for r in self.store.get_many(Collection.SOCIAL_LINKS)]

    def save_social_link(self, link: SocialLink) -> str:
        return self._save(Collection.SOCIAL_LINKS, link)

    def delete_social_link(self, link_id: str) -> bool:
        return self.store.delete_one(Collection.SOCIAL_LINKS, link_id)

    def list_slides(self) -> List[SlideConfig]:
        return [SlideConfig.from_dict(r) for r in self.store.get_many(Collection.HERO_SLIDES)]

    def active_slides(self) -> List[SlideConfig]:
        records = self.store.get_many(Collection.HERO_SLIDES, filters=[("status", "==", STATUS_ACTIVE)])
        return [SlideConfig.from_dict(r) for r in records]

    def save_slide(self, slide: SlideConfig) -> str:
        return self._save(Collection.HERO_SLIDES, slide)

    def delete_slide(self, slide_id: str) -> bool:
        return self.store.delete_one(Collection.HERO_SLIDES, slide_id)

    def list_ads(self) -> List[AdConfig]:
        return [AdConfig.from_dict(r) for r in self.store.get_many(Collection.ADS)]

    def active_ads(self, location: Optional[str] = None) -> List[AdConfig]:
        filters = [("status", "==", STATUS_ACTIVE)]
        if location:
            filters.append(("location", "==", location))
        return [AdConfig.from_dict(r) for r in self.store.get_many(Collection.ADS, filters=filters)]

    def save_ad(self, ad: AdConfig) -> str:
        return self._save(Collection.ADS, ad)

    def delete_ad(self, ad_id: str) -> bool:
        return self.store.delete_one(Collection.ADS, ad_id)

    def _save(self, collection: Collection, item: Any) -> str:
        data = item.to_dict()
        if item.id:
            self.store.update_one(collection, item.id, data)
        else:
            item.id = self.store.add_one(collection, data)
        return item.id

    # ---------------------- Sitemap ----------------------

    def sitemap_entries(self, base_url: str) -> List[SitemapEntry]:
        """Static pages, published posts, menu categories and tags."""
        base_url = base_url.rstrip("/")
        entries = [
            SitemapEntry(url=f"{base_url}{path}", change_frequency=freq, priority=priority)
            for path, freq, priority in STATIC_ROUTES
        ]

        posts = self.list_posts(status=STATUS_PUBLISHED)
        entries.extend(
            SitemapEntry(
                url=f"{base_url}{p.href}",
                change_frequency="weekly",
                priority=0.9,
                last_modified=p.date or None,
            )
            for p in posts
        )

        entries.extend(
            SitemapEntry(url=f"{base_url}{path}", change_frequency="weekly", priority=0.8)
            for path in category_paths(self.get_menu())
        )

        tags = []
        for p in posts:
            for tag in p.tags:
                if tag not in tags:
                    tags.append(tag)
        entries.extend(
            SitemapEntry(url=f"{base_url}/tags/{quote(tag, safe='')}", change_frequency="weekly", priority=0.6)
            for tag in tags
        )
        return entries
