"""
Menu model and tree helpers.

The menu is a tree of items (label + href + children). It is stored under
site-data/menu as {"data": [...]} without ids; ids are assigned when the
menu is loaded for editing and stripped again before saving.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Any, List
import uuid


@dataclass
class MenuItem:
    label: str = ""
    href: str = ""
    children: List["MenuItem"] = field(default_factory=list)
    id: Optional[str] = None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def to_dict(self, with_ids: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "href": self.href}
        if with_ids and self.id is not None:
            data["id"] = self.id
        data["children"] = [c.to_dict(with_ids) for c in self.children]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MenuItem":
        return cls(
            label=data.get("label", ""),
            href=data.get("href", ""),
            children=[cls.from_dict(c) for c in data.get("children") or []],
            id=str(data["id"]) if data.get("id") is not None else None,
        )


def menu_from_data(items: List[dict]) -> List[MenuItem]:
    return [MenuItem.from_dict(item) for item in items or [] if isinstance(item, dict)]


def menu_to_data(items: List[MenuItem]) -> List[dict]:
    """Stored form: ids removed at every level."""
    return [item.to_dict(with_ids=False) for item in strip_ids(items)]


def assign_ids(items: List[MenuItem]) -> List[MenuItem]:
    """Give every item without an id a fresh one, recursively."""
    return [
        MenuItem(
            label=item.label,
            href=item.href,
            children=assign_ids(item.children),
            id=item.id or uuid.uuid4().hex[:12],
        )
        for item in items
    ]


def strip_ids(items: List[MenuItem]) -> List[MenuItem]:
    return [
        MenuItem(label=item.label, href=item.href, children=strip_ids(item.children))
        for item in items
    ]


def remove_item(items: List[MenuItem], item_id: str) -> List[MenuItem]:
    """Tree without the item (and its subtree) whose id matches."""
    return [
        MenuItem(
            label=item.label,
            href=item.href,
            children=remove_item(item.children, item_id),
            id=item.id,
        )
        for item in items
        if item.id != item_id
    ]


def add_child(items: List[MenuItem], parent_id: Optional[str], child: MenuItem) -> List[MenuItem]:
    """
    Tree with child appended under parent_id.

    A parent_id of None appends at the top level. An unknown parent leaves
    the tree unchanged.
    """
    if parent_id is None:
        return list(items) + [child]
    result = []
    for item in items:
        children = add_child(item.children, parent_id, child) if item.children else []
        if item.id == parent_id:
            children = children + [child]
        result.append(MenuItem(label=item.label, href=item.href, children=children, id=item.id))
    return result


def find_category(items: List[MenuItem], path: str) -> Optional[MenuItem]:
    """Menu item whose href equals path, searched depth-first."""
    for item in items:
        if item.href == path:
            return item
        found = find_category(item.children, path)
        if found is not None:
            return found
    return None


def category_hrefs(category: MenuItem) -> List[str]:
    """A parent category covers itself and its direct children."""
    return [category.href] + [child.href for child in category.children]


def category_paths(items: List[MenuItem]) -> List[str]:
    """Every category path in the menu except the home link."""
    paths = []
    for item in items:
        if item.href != "/":
            paths.append(item.href)
        for child in item.children:
            paths.append(child.href)
    return paths


def _menu(*entries) -> List[dict]:
    return [
        {"label": label, "href": href, "children": [{"label": child, "href": path} for child, path in children]}
        for label, href, children in entries
    ]


# Menu used to seed an empty site
DEFAULT_MENU: List[dict] = _menu(
    ("Fashion", "/fashion", [
        ("Nail Care & Art", "/fashion/nail-care-art"),
        ("Women’s Fashion", "/fashion/womens-fashion"),
        ("Men’s Fashion", "/fashion/mens-fashion"),
        ("Kids Fashion & Essentials", "/fashion/kids-fashion"),
    ]),
    ("Health & Beauty", "/health-beauty", [
        ("Skin Care & Glow", "/health-beauty/skin-care"),
        ("Hair Care & Growth", "/health-beauty/hair-care"),
        ("Weight Loss & Fitness", "/health-beauty/fitness"),
    ]),
    ("Home & Kitchen", "/home-kitchen", [
        ("Home Decor Ideas", "/home-kitchen/decor"),
        ("Smart Kitchen Tools", "/home-kitchen/kitchen-tools"),
        ("Cleaning & Storage", "/home-kitchen/cleaning-storage"),
    ]),
    ("Gadgets", "/gadgets", [
        ("Smart Home Devices", "/gadgets/smart-home"),
        ("Portable & Travel Gadgets", "/gadgets/portable-gadgets"),
        ("Trending Amazon Gadgets", "/gadgets/amazon-gadgets"),
    ]),
    ("Pets", "/pets", [
        ("Funny & Viral Pet Gadgets", "/pets/viral-gadgets"),
        ("Amazon Pet Favorites", "/pets/amazon-favorites"),
        ("Dog Training & Care Hacks", "/pets/dog-care"),
    ]),
    ("Fishing", "/fishing", [
        ("Fishing Gear & Tackle", "/fishing/gear"),
        ("Fishing Tips & Techniques", "/fishing/tips"),
        ("Best Fishing Spots", "/fishing/spots"),
        ("Fishing Accessories", "/fishing/accessories"),
    ]),
)
