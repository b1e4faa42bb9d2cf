from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from bson.errors import InvalidDocument
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from common.mongo.types import parse_object_id

from ..exceptions import PostNotFoundError, PostValidationError, StoreUnavailableError
from ..models.blog_post import MUTABLE_FIELDS, Author, BlogPost, BlogPostDraft
from .documents.blog_post_document import AuthorDocument, BlogPostDocument
from .interfaces import BlogPostRepositoryInterface

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "blogposts"


class BlogPostRepository(BlogPostRepositoryInterface):
    """blogposts 컬렉션에 대한 MongoDB 접근 레이어.

    - ObjectId 변환은 이 레이어 안에서만 일어난다.
    - pymongo 예외는 StoreUnavailableError 로 바꿔서 올려 보낸다.
    """

    def __init__(
        self, database: Database, collection_name: str = DEFAULT_COLLECTION_NAME
    ) -> None:
        self._db = database
        self._col = database[collection_name]

    # --- helpers -----------------------------------------------------------------
    @staticmethod
    def _from_document(doc: dict) -> BlogPost:
        return BlogPostDocument.model_validate(doc).to_domain()

    @staticmethod
    def _to_set_doc(changes: dict[str, Any]) -> dict[str, Any]:
        set_doc: dict[str, Any] = {}
        for key, value in changes.items():
            if key not in MUTABLE_FIELDS:
                continue
            if isinstance(value, Author):
                value = AuthorDocument(
                    first_name=value.first_name, last_name=value.last_name
                ).model_dump(by_alias=True)
            set_doc[key] = value
        return set_doc

    @contextmanager
    def _store_call(self, operation: str) -> Iterator[None]:
        try:
            yield
        except InvalidDocument as exc:
            # DocumentTooLarge 등 BSON 으로 저장할 수 없는 요청 데이터
            logger.warning("blogposts %s rejected document: %s", operation, exc)
            raise PostValidationError(f"post cannot be stored: {exc}") from exc
        except PyMongoError as exc:
            logger.error(
                "blogposts %s failed: %s: %s", operation, type(exc).__name__, exc
            )
            raise StoreUnavailableError(f"document store unavailable during {operation}") from exc

    # --- queries -----------------------------------------------------------------
    def list(self) -> list[BlogPost]:
        """모든 포스트를 created desc, _id desc 순으로 반환한다."""

        items: list[BlogPost] = []
        with self._store_call("list"):
            cursor = self._col.find(
                {}, sort=[("created", DESCENDING), ("_id", DESCENDING)]
            )
            for doc in cursor:
                items.append(self._from_document(doc))
        return items

    def find_by_id(self, id_value: str) -> BlogPost:
        object_id = parse_object_id(id_value)
        if object_id is None:
            raise PostNotFoundError(id_value)

        with self._store_call("find_by_id"):
            doc = self._col.find_one({"_id": object_id})
        if not doc:
            raise PostNotFoundError(id_value)
        return self._from_document(doc)

    # --- commands ----------------------------------------------------------------
    def insert(self, draft: BlogPostDraft) -> BlogPost:
        """새 포스트를 삽입하고 저장된 형태 그대로 반환한다."""

        document = BlogPostDocument.from_draft(draft)
        with self._store_call("insert"):
            result = self._col.insert_one(document.to_mongo_record())

        document.id = result.inserted_id
        return document.to_domain()

    def update_by_id(self, id_value: str, changes: dict[str, Any]) -> BlogPost:
        object_id = parse_object_id(id_value)
        if object_id is None:
            raise PostNotFoundError(id_value)

        set_doc = self._to_set_doc(changes)
        if not set_doc:
            # 바꿀 필드가 없으면 현재 상태를 그대로 돌려준다.
            return self.find_by_id(id_value)

        with self._store_call("update_by_id"):
            doc = self._col.find_one_and_update(
                {"_id": object_id},
                {"$set": set_doc},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise PostNotFoundError(id_value)
        return self._from_document(doc)

    def delete_by_id(self, id_value: str) -> None:
        object_id = parse_object_id(id_value)
        if object_id is None:
            raise PostNotFoundError(id_value)

        with self._store_call("delete_by_id"):
            result = self._col.delete_one({"_id": object_id})
        if result.deleted_count == 0:
            raise PostNotFoundError(id_value)
