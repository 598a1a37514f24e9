from blogstore.models import DEFAULT_MENU, AdConfig, MenuItem, Post, SiteSettings, SocialLink
from blogstore.models.menu import (
    add_child,
    assign_ids,
    category_hrefs,
    category_paths,
    find_category,
    menu_from_data,
    menu_to_data,
    remove_item,
)

MENU = [
    {"label": "Home", "href": "/", "children": []},
    {
        "label": "Fashion",
        "href": "/fashion",
        "children": [
            {"label": "Men", "href": "/fashion/mens-fashion"},
            {"label": "Women", "href": "/fashion/womens-fashion"},
        ],
    },
    {"label": "Pets", "href": "/pets"},
]


def test_post_round_trip_keeps_stored_keys():
    data = {
        "id": 17,
        "slug": " summer-looks ",
        "title": "Summer looks",
        "status": "published",
        "tags": ["style", " ", "summer "],
        "views": "4",
        "unknownField": "ignored",
    }
    post = Post.from_dict(data)

    assert post.id == "17"
    assert post.slug == "summer-looks"
    assert post.tags == ["style", "summer"]
    assert post.views == 4
    assert post.href == "/posts/summer-looks"
    stored = post.to_dict()
    assert "scheduledAt" not in stored
    assert "unknownField" not in stored
    assert stored["seoTitle"] == ""


def test_flat_models_drop_unset_optionals():
    assert SocialLink.from_dict({"id": 3, "platform": "Youtube", "url": "u"}).to_dict() == {
        "id": "3", "platform": "Youtube", "url": "u",
    }
    ad = AdConfig.from_dict({"name": "top", "type": "code", "content": "<script></script>"})
    assert ad.is_active
    assert "link" not in ad.to_dict()
    assert SiteSettings.from_dict({"siteName": "Amaj"}).siteName == "Amaj"


def test_menu_round_trip_strips_ids():
    items = assign_ids(menu_from_data(MENU))
    assert all(item.id for item in items)
    assert all(child.id for child in items[1].children)

    stored = menu_to_data(items)
    assert "id" not in stored[1]
    assert "id" not in stored[1]["children"][0]
    assert stored[2] == {"label": "Pets", "href": "/pets", "children": []}


def test_assign_ids_keeps_existing_ids():
    items = assign_ids([MenuItem(label="A", href="/a", id="keep")])
    assert items[0].id == "keep"


def test_find_category_searches_children():
    items = menu_from_data(MENU)
    assert find_category(items, "/fashion/womens-fashion").label == "Women"
    assert find_category(items, "/nowhere") is None


def test_parent_category_covers_children():
    fashion = find_category(menu_from_data(MENU), "/fashion")
    assert category_hrefs(fashion) == ["/fashion", "/fashion/mens-fashion", "/fashion/womens-fashion"]
    pets = find_category(menu_from_data(MENU), "/pets")
    assert category_hrefs(pets) == ["/pets"]


def test_category_paths_skip_home():
    assert category_paths(menu_from_data(MENU)) == [
        "/fashion", "/fashion/mens-fashion", "/fashion/womens-fashion", "/pets",
    ]


def test_remove_and_add_items():
    items = assign_ids(menu_from_data(MENU))
    men_id = items[1].children[0].id

    without_men = remove_item(items, men_id)
    assert [c.label for c in without_men[1].children] == ["Women"]

    kids = MenuItem(label="Kids", href="/fashion/kids", id="kids")
    with_kids = add_child(without_men, items[1].id, kids)
    assert [c.label for c in with_kids[1].children] == ["Women", "Kids"]

    top = add_child(with_kids, None, MenuItem(label="Fishing", href="/fishing"))
    assert top[-1].label == "Fishing"

    assert add_child(items, "missing", kids) == items


def test_default_menu_shape():
    assert len(DEFAULT_MENU) == 6
    assert DEFAULT_MENU[0]["href"] == "/fashion"
    assert all(child["href"].startswith(DEFAULT_MENU[0]["href"]) for child in DEFAULT_MENU[0]["children"])
