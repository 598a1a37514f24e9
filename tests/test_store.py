import json
import uuid

import pytest

from blogstore.collections import Collection
from blogstore.config import Config, DBConfig, StorageConfig
from blogstore.exceptions import (
    InvalidArgument,
    PersistenceFailure,
    RecordNotFound,
    StorageUnavailable,
)
from blogstore.persistence import JSONFileBackend, OfflineBackend
from blogstore.store import DocumentStore, open_store

from conftest import make_post

PUBLISHED = [("status", "==", "published")]


def test_add_then_get_returns_payload_plus_id(store):
    payload = {"platform": "Youtube", "url": "https://youtube.com/@amaj"}
    new_id = store.add_one("socialLinks", payload)

    assert uuid.UUID(new_id)
    assert store.get_one("socialLinks", new_id) == {**payload, "id": new_id}


def test_add_ignores_caller_supplied_id(store):
    new_id = store.add_one("ads", {"id": "mine", "name": "banner"})
    assert new_id != "mine"
    assert store.get_one("ads", "mine") is None


def test_generated_ids_are_unique(store):
    ids = {store.add_one("ads", {"name": str(n)}) for n in range(50)}
    assert len(ids) == 50


def test_updates_merge_in_order(store):
    post_id = store.add_one("posts", make_post(1, status="draft"))
    store.update_one("posts", post_id, {"title": "First", "views": 3})
    store.update_one("posts", post_id, {"title": "Second", "tags": ["a"]})

    record = store.get_one("posts", post_id)
    assert record["title"] == "Second"
    assert record["views"] == 3
    assert record["tags"] == ["a"]
    assert record["slug"] == "post-1"
    assert record["status"] == "draft"
    assert record["id"] == post_id


def test_update_cannot_change_id(store):
    post_id = store.add_one("posts", make_post(1))
    merged = store.update_one("posts", post_id, {"id": "other", "title": "x"})
    assert merged["id"] == post_id


def test_update_missing_record_fails(store):
    with pytest.raises(RecordNotFound):
        store.update_one("posts", "missing", {"title": "x"})


def test_delete_then_get_is_none(store):
    post_id = store.add_one("posts", make_post(1))
    assert store.delete_one("posts", post_id) is True
    assert store.get_one("posts", post_id) is None
    assert store.delete_one("posts", "never-existed") is False
    assert store.get_one("posts", "never-existed") is None


def test_set_one_replaces_whole_record(store):
    store.set_one("heroSlides", "hero", {"title": "Old", "subtitle": "gone soon"})
    store.set_one("heroSlides", "hero", {"title": "New"})
    assert store.get_one("heroSlides", "hero") == {"title": "New", "id": "hero"}


def test_draft_hidden_until_published(store):
    post_id = store.add_one("posts", make_post(1, status="draft"))
    assert store.get_many("posts", filters=PUBLISHED) == []

    store.update_one("posts", post_id, {"status": "published"})
    assert [p["id"] for p in store.get_many("posts", filters=PUBLISHED)] == [post_id]


def test_page_two_of_fifteen_published_posts(store):
    for n in range(1, 16):
        store.add_one("posts", make_post(n))
    store.add_one("posts", make_post(20, status="draft"))

    page = store.get_page("posts", 2, 10, filters=PUBLISHED, sort=("date", "desc"))

    assert page.total_count == 15
    assert page.total_pages == 2
    assert [p["slug"] for p in page.records] == [f"post-{n}" for n in range(5, 0, -1)]
    assert page.has_previous and not page.has_next


def test_pages_partition_the_sorted_sequence(store):
    for n in range(1, 24):
        store.add_one("posts", make_post(n, views=n % 7))
    sort = ("views", "desc")
    expected = store.get_many("posts", sort=sort)

    first = store.get_page("posts", 1, 5, sort=sort)
    collected = []
    for page_no in range(1, first.total_pages + 1):
        collected.extend(store.get_page("posts", page_no, 5, sort=sort).records)

    assert len(collected) == first.total_count == 23
    assert len({r["id"] for r in collected}) == 23
    assert collected == expected


def test_page_beyond_range_is_empty(store):
    store.add_one("posts", make_post(1))
    page = store.get_page("posts", 9, 10)
    assert page.records == []
    assert page.total_count == 1
    assert page.total_pages == 1


@pytest.mark.parametrize("page,size", [(1, 0), (1, -3), (0, 10)])
def test_invalid_pagination_rejected(store, page, size):
    with pytest.raises(InvalidArgument):
        store.get_page("posts", page, size)


def test_get_many_is_idempotent(store):
    for n in range(1, 6):
        store.add_one("posts", make_post(n))
    args = dict(filters=PUBLISHED, sort=("date", "asc"), limit=3)
    assert store.get_many("posts", **args) == store.get_many("posts", **args)


def test_unknown_collection_reads_degrade_writes_fail(store):
    assert store.get_many("comments") == []
    assert store.get_one("comments", "1") is None
    assert store.get_page("comments", 1, 10).records == []
    with pytest.raises(InvalidArgument):
        store.add_one("comments", {"text": "hi"})
    with pytest.raises(InvalidArgument):
        store.delete_one("comments", "1")


def test_collection_enum_accepted(store):
    new_id = store.add_one(Collection.ADS, {"name": "x"})
    assert store.get_one(Collection.ADS, new_id)["name"] == "x"


def test_non_mapping_payload_rejected(store):
    with pytest.raises(InvalidArgument):
        store.add_one("ads", ["not", "a", "dict"])


# ---------------------- site-data ----------------------


def test_missing_menu_is_empty_data(store):
    assert store.get_one("site-data", "menu") == {"data": []}


def test_missing_settings_is_empty_object(store):
    assert store.get_one("site-data", "settings") == {}


def test_unknown_site_data_id_is_none(store):
    assert store.get_one("site-data", "footer") is None


def test_menu_stored_as_bare_array_is_wrapped(store, backend):
    path = backend.data_dir / "menu.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([{"label": "Pets", "href": "/pets"}]), encoding="utf-8")
    assert store.get_one("site-data", "menu") == {"data": [{"label": "Pets", "href": "/pets"}]}


def test_menu_update_and_settings_set(store):
    store.update_one("site-data", "menu", {"data": [{"label": "Pets", "href": "/pets", "children": []}]})
    store.set_one("site-data", "settings", {"siteName": "Amaj World", "copyright": "2024"})

    assert store.get_one("site-data", "menu")["data"][0]["href"] == "/pets"
    assert store.get_one("site-data", "settings") == {"siteName": "Amaj World", "copyright": "2024"}


def test_get_many_site_data_lists_both_singletons(store):
    store.set_one("site-data", "settings", {"siteName": "Amaj World"})
    docs = store.get_many("site-data")
    assert docs == [
        {"id": "menu", "data": []},
        {"id": "settings", "siteName": "Amaj World"},
    ]


def test_site_data_misuse_rejected(store):
    with pytest.raises(InvalidArgument):
        store.add_one("site-data", {"data": []})
    with pytest.raises(InvalidArgument):
        store.delete_one("site-data", "menu")
    with pytest.raises(InvalidArgument):
        store.set_one("site-data", "footer", {})


# ---------------------- degraded storage ----------------------


def test_offline_reads_degrade_and_writes_fail():
    store = DocumentStore(OfflineBackend("no route to host"))

    assert store.get_many("posts", filters=PUBLISHED) == []
    assert store.get_one("posts", "1") is None
    assert store.get_one("site-data", "menu") == {"data": []}
    page = store.get_page("posts", 1, 10)
    assert (page.records, page.total_count, page.total_pages) == ([], 0, 0)

    with pytest.raises(StorageUnavailable):
        store.add_one("posts", make_post(1))
    with pytest.raises(StorageUnavailable):
        store.update_one("posts", "1", {"title": "x"})
    with pytest.raises(StorageUnavailable):
        store.delete_one("posts", "1")


def test_offline_reads_use_local_fallback_but_writes_do_not(tmp_path):
    local = JSONFileBackend(tmp_path)
    DocumentStore(local).add_one("posts", make_post(1))
    store = DocumentStore(OfflineBackend(), fallback=local)

    assert [p["slug"] for p in store.get_many("posts")] == ["post-1"]
    with pytest.raises(StorageUnavailable):
        store.add_one("posts", make_post(2))
    assert len(DocumentStore(local).get_many("posts")) == 1


class ExplodingBackend(JSONFileBackend):
    def find(self, collection, query):
        raise RuntimeError("socket closed")

    def insert(self, collection, record):
        raise RuntimeError("disk on fire")


def test_unexpected_errors_follow_the_same_policy(tmp_path):
    store = DocumentStore(ExplodingBackend(tmp_path))
    assert store.get_many("posts") == []
    with pytest.raises(PersistenceFailure):
        store.add_one("posts", make_post(1))


def test_corrupt_local_file_degrades_reads(store, backend):
    path = backend.data_dir / "posts.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[{", encoding="utf-8")
    assert store.get_many("posts") == []
    with pytest.raises(PersistenceFailure):
        store.add_one("posts", make_post(1))


# ---------------------- backend selection ----------------------


def _config(tmp_path, backend, read_fallback=True, **db):
    return Config(
        base_dir=tmp_path,
        storage=StorageConfig(backend=backend, data_dir=tmp_path / "data", read_fallback=read_fallback),
        db=DBConfig(**{"host": "", "name": "", "user": "", **db}),
    )


def test_open_store_local(tmp_path):
    store = open_store(_config(tmp_path, "local"))
    assert store.mode == "local"
    assert store.is_connected
    assert store.fallback is None


def test_open_store_remote_without_credentials_runs_offline(tmp_path):
    store = open_store(_config(tmp_path, "remote"))
    assert store.mode == "offline"
    assert not store.is_connected
    assert store.fallback is not None
    with pytest.raises(StorageUnavailable):
        store.add_one("ads", {"name": "x"})


def test_open_store_remote_without_fallback(tmp_path):
    store = open_store(_config(tmp_path, "remote", read_fallback=False))
    assert store.fallback is None
    assert store.get_many("posts") == []
