from __future__ import annotations

import copy
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Iterator

import pytest
from bson import ObjectId
from pymongo import ReturnDocument


def _to_stored(value: Any) -> Any:
    # pymongo 처럼 datetime 은 naive UTC 로 저장되고 읽힌다.
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dict):
        return {k: _to_stored(v) for k, v in value.items()}
    return value


class FakeCollection:
    """BlogPostRepository 가 사용하는 pymongo Collection API 일부만 흉내 낸 인메모리 구현."""

    def __init__(self) -> None:
        self.docs: dict[ObjectId, dict[str, Any]] = {}

    def _matches(self, doc: dict[str, Any], flt: dict[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in flt.items())

    def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        stored = _to_stored(copy.deepcopy(doc))
        stored.setdefault("_id", ObjectId())
        self.docs[stored["_id"]] = stored
        return SimpleNamespace(inserted_id=stored["_id"])

    def find(
        self, flt: dict[str, Any], sort: list[tuple[str, int]] | None = None
    ) -> Iterator[dict[str, Any]]:
        items = [d for d in self.docs.values() if self._matches(d, flt)]
        for key, direction in reversed(sort or []):
            items.sort(key=lambda d: d[key], reverse=direction < 0)
        return iter(copy.deepcopy(items))

    def find_one(self, flt: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs.values():
            if self._matches(doc, flt):
                return copy.deepcopy(doc)
        return None

    def find_one_and_update(
        self,
        flt: dict[str, Any],
        update: dict[str, Any],
        return_document: Any = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        for doc in self.docs.values():
            if self._matches(doc, flt):
                before = copy.deepcopy(doc)
                doc.update(_to_stored(copy.deepcopy(update["$set"])))
                if return_document == ReturnDocument.AFTER:
                    return copy.deepcopy(doc)
                return before
        return None

    def delete_one(self, flt: dict[str, Any]) -> SimpleNamespace:
        for key, doc in list(self.docs.items()):
            if self._matches(doc, flt):
                del self.docs[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.fixture
def fake_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def fake_db(fake_collection: FakeCollection) -> dict[str, FakeCollection]:
    # BlogPostRepository 는 database[collection_name] 만 사용한다.
    return {"blogposts": fake_collection}
