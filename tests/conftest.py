import pytest

from blogstore.content import ContentService
from blogstore.persistence import JSONFileBackend
from blogstore.store import DocumentStore


@pytest.fixture
def backend(tmp_path):
    return JSONFileBackend(tmp_path / "data")


@pytest.fixture
def store(backend):
    return DocumentStore(backend)


@pytest.fixture
def content(store):
    return ContentService(store)


def make_post(n, status="published", **extra):
    post = {
        "slug": f"post-{n}",
        "title": f"Post {n}",
        "content": f"<p>Body of post {n}</p>",
        "category": "/fashion",
        "date": f"2024-01-{n:02d}T09:00:00Z",
        "status": status,
        "tags": [],
        "views": 0,
    }
    post.update(extra)
    return post
