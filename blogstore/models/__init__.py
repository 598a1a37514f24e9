"""
Data models for the blog platform.

These models mirror the stored JSON records and convert to and from the
plain dicts the document store works with.
"""

from .post import Post, POST_STATUSES, STATUS_PUBLISHED, STATUS_DRAFT, STATUS_SCHEDULED
from .menu import MenuItem, DEFAULT_MENU
from .site import SiteSettings, SocialLink, SlideConfig, AdConfig

__all__ = [
    # Posts
    "Post",
    "POST_STATUSES",
    "STATUS_PUBLISHED",
    "STATUS_DRAFT",
    "STATUS_SCHEDULED",

    # Menu
    "MenuItem",
    "DEFAULT_MENU",

    # Site furniture
    "SiteSettings",
    "SocialLink",
    "SlideConfig",
    "AdConfig",
]
