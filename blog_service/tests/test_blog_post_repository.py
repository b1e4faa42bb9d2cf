from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from bson.errors import InvalidDocument
from pymongo.errors import AutoReconnect, DocumentTooLarge, ServerSelectionTimeoutError

from blog_service.app.exceptions import (
    PostNotFoundError,
    PostValidationError,
    StoreUnavailableError,
)
from blog_service.app.models.blog_post import Author, BlogPostDraft
from blog_service.app.repositories.blog_post_repository import BlogPostRepository


def _draft(
    title: str = "title",
    content: str = "content",
    created: datetime | None = None,
) -> BlogPostDraft:
    data: dict = {
        "title": title,
        "content": content,
        "author": Author(first_name="Jane", last_name="Doe"),
    }
    if created is not None:
        data["created"] = created
    return BlogPostDraft(**data)


@pytest.fixture
def repo(fake_db) -> BlogPostRepository:
    return BlogPostRepository(fake_db)


def test_insert_assigns_id_and_stores_composite_author(repo, fake_collection) -> None:
    post = repo.insert(_draft())

    assert post.id
    stored = fake_collection.docs[ObjectId(post.id)]
    assert stored["author"] == {"firstName": "Jane", "lastName": "Doe"}
    assert stored["title"] == "title"
    assert "id" not in stored


def test_insert_truncates_created_to_millis(repo) -> None:
    created = datetime(2017, 7, 15, 11, 9, 35, 158765, tzinfo=timezone.utc)

    post = repo.insert(_draft(created=created))
    found = repo.find_by_id(post.id)

    # 저장 직후 응답과 이후 조회 결과가 같아야 한다.
    assert post.created == found.created
    assert found.created == datetime(2017, 7, 15, 11, 9, 35, 158000, tzinfo=timezone.utc)


def test_find_by_id_round_trips_fields(repo) -> None:
    post = repo.insert(_draft(title="A", content="B"))

    found = repo.find_by_id(post.id)

    assert found.id == post.id
    assert found.title == "A"
    assert found.content == "B"
    assert found.author.full_name == "Jane Doe"
    assert found.created.tzinfo is not None


@pytest.mark.parametrize("id_value", [str(ObjectId()), "not-an-object-id", ""])
def test_unknown_or_malformed_ids_raise_not_found(repo, id_value: str) -> None:
    with pytest.raises(PostNotFoundError):
        repo.find_by_id(id_value)
    with pytest.raises(PostNotFoundError):
        repo.update_by_id(id_value, {"title": "x"})
    with pytest.raises(PostNotFoundError):
        repo.delete_by_id(id_value)


def test_list_is_empty_without_posts(repo) -> None:
    assert repo.list() == []


def test_list_orders_by_created_desc(repo) -> None:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    older = repo.insert(_draft(title="older", created=base))
    newer = repo.insert(_draft(title="newer", created=base + timedelta(days=1)))

    ids = [post.id for post in repo.list()]

    assert ids == [newer.id, older.id]


def test_update_overwrites_only_given_fields(repo) -> None:
    post = repo.insert(_draft(title="A", content="B"))

    updated = repo.update_by_id(post.id, {"content": "X"})

    assert updated.content == "X"
    assert updated.title == post.title
    assert updated.author == post.author
    assert updated.created == post.created
    assert updated.id == post.id


def test_update_replaces_author_as_sub_document(repo, fake_collection) -> None:
    post = repo.insert(_draft())

    repo.update_by_id(post.id, {"author": Author(first_name="John", last_name="Roe")})

    stored = fake_collection.docs[ObjectId(post.id)]
    assert stored["author"] == {"firstName": "John", "lastName": "Roe"}


def test_update_ignores_immutable_and_unknown_fields(repo) -> None:
    post = repo.insert(_draft())

    updated = repo.update_by_id(
        post.id,
        {"created": datetime(2000, 1, 1, tzinfo=timezone.utc), "id": "other", "x": 1},
    )

    assert updated == post


def test_empty_update_returns_unchanged_post(repo) -> None:
    post = repo.insert(_draft())

    assert repo.update_by_id(post.id, {}) == post


def test_delete_removes_post_and_second_delete_fails(repo) -> None:
    post = repo.insert(_draft())

    repo.delete_by_id(post.id)

    with pytest.raises(PostNotFoundError):
        repo.find_by_id(post.id)
    with pytest.raises(PostNotFoundError):
        repo.delete_by_id(post.id)


class _UnreachableCollection:
    def __getattr__(self, name: str):
        def _fail(*args, **kwargs):
            raise ServerSelectionTimeoutError("no servers available")

        return _fail


class _FlakyCursorCollection:
    def find(self, *args, **kwargs):
        def _cursor():
            raise AutoReconnect("connection reset")
            yield  # pragma: no cover

        return _cursor()


def test_driver_errors_are_translated_to_store_unavailable() -> None:
    repo = BlogPostRepository({"blogposts": _UnreachableCollection()})
    post_id = str(ObjectId())

    with pytest.raises(StoreUnavailableError):
        repo.insert(_draft())
    with pytest.raises(StoreUnavailableError):
        repo.list()
    with pytest.raises(StoreUnavailableError):
        repo.find_by_id(post_id)
    with pytest.raises(StoreUnavailableError):
        repo.update_by_id(post_id, {"title": "x"})
    with pytest.raises(StoreUnavailableError):
        repo.delete_by_id(post_id)


def test_errors_while_iterating_cursor_are_translated() -> None:
    repo = BlogPostRepository({"blogposts": _FlakyCursorCollection()})

    with pytest.raises(StoreUnavailableError):
        repo.list()


def test_custom_collection_name_is_used(fake_collection) -> None:
    repo = BlogPostRepository({"posts_v2": fake_collection}, collection_name="posts_v2")

    post = repo.insert(_draft())

    assert ObjectId(post.id) in fake_collection.docs


class _RejectingCollection:
    def insert_one(self, *args, **kwargs):
        raise DocumentTooLarge("BSON document too large (17000000 bytes)")

    def find_one_and_update(self, *args, **kwargs):
        raise InvalidDocument("cannot encode object")


def test_unencodable_documents_are_translated_to_validation_error() -> None:
    repo = BlogPostRepository({"blogposts": _RejectingCollection()})

    with pytest.raises(PostValidationError):
        repo.insert(_draft())
    with pytest.raises(PostValidationError):
        repo.update_by_id(str(ObjectId()), {"title": "x"})
