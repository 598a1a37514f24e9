from blogstore.models import AdConfig, MenuItem, Post, SiteSettings, SlideConfig, SocialLink
from blogstore.models.menu import assign_ids, menu_from_data

from conftest import make_post

MENU = [
    {
        "label": "Fashion",
        "href": "/fashion",
        "children": [{"label": "Men", "href": "/fashion/mens-fashion"}],
    },
    {"label": "Pets", "href": "/pets", "children": []},
]


def seed(store, *posts):
    return [store.add_one("posts", p) for p in posts]


def test_save_post_adds_then_updates(content):
    post = Post(slug="first", title="First", status="draft")
    post_id = content.save_post(post)

    stored = content.get_post(post_id)
    assert stored.title == "First"
    assert stored.date  # stamped on creation

    stored.title = "First, edited"
    content.save_post(stored)
    assert content.get_post(post_id).title == "First, edited"
    assert content.list_posts() == [content.get_post(post_id)]


def test_get_post_by_slug_only_sees_published(content, store):
    seed(store, make_post(1, slug="hidden", status="draft"), make_post(2, slug="shown"))
    assert content.get_post_by_slug("hidden") is None
    assert content.get_post_by_slug("shown").title == "Post 2"


def test_published_page(content, store):
    seed(store, *[make_post(n) for n in range(1, 8)], make_post(9, status="draft"))
    page = content.published_page(2, 3)
    assert [r["slug"] for r in page.records] == ["post-4", "post-3", "post-2"]
    assert page.total_count == 7
    assert page.total_pages == 3


def test_category_includes_child_categories_and_splits_top_posts(content, store):
    seed(
        store,
        make_post(1, category="/fashion", views=1),
        make_post(2, category="/fashion/mens-fashion", views=50),
        make_post(3, category="/fashion", views=10),
        make_post(4, category="/fashion", views=0),
        make_post(5, category="/fashion", views=7),
        make_post(6, category="/pets", views=99),
        make_post(7, category="/fashion", status="draft", views=500),
    )
    menu = menu_from_data(MENU)

    result = content.posts_for_category(menu, "/fashion")
    assert [p.slug for p in result.top_posts] == ["post-2", "post-3", "post-5"]
    assert [p.slug for p in result.other_posts] == ["post-4", "post-1"]
    assert result.total == 5

    child = content.posts_for_category(menu, "/fashion/mens-fashion")
    assert [p.slug for p in child.top_posts] == ["post-2"]

    assert content.posts_for_category(menu, "/unknown") is None


def test_tag_and_search(content, store):
    seed(
        store,
        make_post(1, title="Best Dog Toys", tags=["Pets", "Toys"]),
        make_post(2, title="Fishing reels", content="<p>A guide to toys for anglers</p>"),
        make_post(3, title="Winter coats", tags=["fashion"]),
        make_post(4, title="Draft toys", status="draft", tags=["toys"]),
    )

    assert [p.slug for p in content.posts_with_tag("toys")] == ["post-1"]
    assert [p.slug for p in content.search_posts("TOYS")] == ["post-2", "post-1"]
    assert [p.slug for p in content.search_posts("fashion")] == ["post-3"]
    assert content.search_posts("   ") == []


def test_related_posts_share_category_and_exclude_self(content, store):
    ids = seed(
        store,
        make_post(1, category="/pets"),
        make_post(2, category="/pets"),
        make_post(3, category="/fashion"),
        make_post(4, category="/pets", status="draft"),
    )
    post = content.get_post(ids[0])
    assert [p.slug for p in content.related_posts(post)] == ["post-2"]
    assert content.related_posts(Post(id="x")) == []


def test_increment_views(content, store):
    (post_id,) = seed(store, make_post(1, views=2))
    assert content.increment_views(post_id) == 3
    assert content.increment_views(post_id) == 4
    assert content.get_post(post_id).views == 4
    assert content.increment_views("missing") == 0


def test_dashboard_stats(content, store):
    seed(
        store,
        make_post(1, views=3),
        make_post(2, status="draft", views=1),
        make_post(3, status="scheduled", scheduledAt="2030-01-01T00:00:00Z"),
    )
    assert content.dashboard_stats().to_dict() == {
        "total_posts": 3,
        "published": 1,
        "drafts": 1,
        "scheduled": 1,
        "total_views": 4,
    }


def test_menu_saved_without_ids(content, store):
    assert content.get_menu() == []

    items = assign_ids(menu_from_data(MENU))
    content.save_menu(items)

    raw = store.get_one("site-data", "menu")
    assert "id" not in raw["data"][0]
    assert [item.href for item in content.get_menu()] == ["/fashion", "/pets"]


def test_settings_round_trip(content):
    assert content.get_settings() == SiteSettings()
    content.save_settings(SiteSettings(siteName="Amaj World", copyright="© 2024"))
    assert content.get_settings().siteName == "Amaj World"


def test_slides_ads_and_social_links(content):
    content.save_slide(SlideConfig(title="Hero", imageUrl="/hero.jpg"))
    content.save_slide(SlideConfig(title="Old", imageUrl="/old.jpg", status="inactive"))
    assert [s.title for s in content.active_slides()] == ["Hero"]
    assert len(content.list_slides()) == 2

    top = AdConfig(name="Top", content="/ad.png", link="https://shop", location="home-top")
    content.save_ad(top)
    content.save_ad(AdConfig(name="Bottom", type="code", content="<ins/>", location="post-bottom"))
    assert [a.name for a in content.active_ads("home-top")] == ["Top"]
    assert len(content.active_ads()) == 2

    top.status = "inactive"
    content.save_ad(top)
    assert [a.name for a in content.active_ads()] == ["Bottom"]
    assert content.delete_ad(top.id) is True
    assert len(content.list_ads()) == 1

    link_id = content.save_social_link(SocialLink(platform="Youtube", url="https://youtube.com"))
    assert [link.platform for link in content.list_social_links()] == ["Youtube"]
    assert content.delete_social_link(link_id) is True


def test_sitemap_entries(content, store):
    seed(
        store,
        make_post(1, slug="dog-toys", tags=["Pet Care"]),
        make_post(2, slug="draft", status="draft", tags=["secret"]),
    )
    content.save_menu([MenuItem(label="Home", href="/"), MenuItem(label="Pets", href="/pets")])

    urls = [e.url for e in content.sitemap_entries("https://example.com/")]

    assert urls[0] == "https://example.com"
    assert "https://example.com/all-posts" in urls
    assert "https://example.com/posts/dog-toys" in urls
    assert "https://example.com/posts/draft" not in urls
    assert "https://example.com/pets" in urls
    assert "https://example.com/tags/Pet%20Care" in urls
    assert not any("secret" in u for u in urls)
