from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, Request
from pymongo.database import Database

from ..models.blog_post import MUTABLE_FIELDS, BlogPost, BlogPostDraft
from ..repositories.blog_post_repository import BlogPostRepository
from ..repositories.interfaces import BlogPostRepositoryInterface

logger = logging.getLogger(__name__)


class PostsService:
    """블로그 포스트 CRUD 비즈니스 로직.

    - Repository 에만 의존하고, Mongo 세부 구현은 알지 않는다.
    - 입력 검증은 API 스키마에서 끝난 상태로 들어온다고 가정한다.
    """

    def __init__(self, post_repo: BlogPostRepositoryInterface) -> None:
        self._post_repo = post_repo

    def list_posts(self) -> list[BlogPost]:
        return self._post_repo.list()

    def get_post(self, post_id: str) -> BlogPost:
        return self._post_repo.find_by_id(post_id)

    def create_post(self, draft: BlogPostDraft) -> BlogPost:
        post = self._post_repo.insert(draft)
        logger.info("blog post created", extra={"post_id": post.id})
        return post

    def update_post(self, post_id: str, changes: dict[str, Any]) -> BlogPost:
        """명시적으로 전달된 필드만 덮어쓴다 (last-writer-wins).

        변경할 필드가 없으면 저장된 포스트를 그대로 반환한다.
        """

        applicable = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
        post = self._post_repo.update_by_id(post_id, applicable)
        if applicable:
            logger.info(
                "blog post updated (fields=%s)",
                ",".join(sorted(applicable)),
                extra={"post_id": post_id},
            )
        return post

    def delete_post(self, post_id: str) -> None:
        self._post_repo.delete_by_id(post_id)
        logger.info("blog post deleted", extra={"post_id": post_id})


def get_database(request: Request) -> Database:
    """lifespan 에서 연 MongoConnection 의 Database 를 꺼낸다."""

    return request.app.state.mongo.database


def get_posts_service(
    request: Request,
    db: Database = Depends(get_database),
) -> PostsService:
    """FastAPI DI용 PostsService 팩토리."""

    collection = request.app.state.config.posts.collection
    return PostsService(BlogPostRepository(db, collection))
