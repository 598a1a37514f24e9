"""
Site furniture models: settings, social links, hero slides and ads.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional, Any

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"

AD_TYPE_IMAGE = "image"
AD_TYPE_CODE = "code"

AD_LOCATIONS = ("home-top", "post-bottom")


class _Record:
    """to_dict/from_dict shared by the flat record models."""

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if values.get("id") is not None:
            values["id"] = str(values["id"])
        return cls(**values)


@dataclass
class SiteSettings(_Record):
    """Singleton stored at site-data/settings."""
    siteName: str = ""
    siteDescription: str = ""
    logoUrl: str = ""
    copyright: str = ""


@dataclass
class SocialLink(_Record):
    id: str = ""
    platform: str = ""  # Facebook, Twitter, Instagram, Linkedin, Youtube
    url: str = ""
    icon: Optional[str] = None


@dataclass
class SlideConfig(_Record):
    id: str = ""
    title: str = ""
    imageUrl: str = ""
    subtitle: Optional[str] = None
    buttonText: Optional[str] = None
    buttonLink: Optional[str] = None
    status: str = STATUS_ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass
class AdConfig(_Record):
    """
    An ad placement.

    For image ads ``content`` is the image URL and ``link`` the click-through;
    for code ads ``content`` is the snippet to inject.
    """
    id: str = ""
    name: str = ""
    type: str = AD_TYPE_IMAGE
    content: str = ""
    link: Optional[str] = None
    location: str = "home-top"
    status: str = STATUS_ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
