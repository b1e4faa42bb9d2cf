from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from common.types.datetime import UtcDateTime
from common.types.objectid import ObjectIdStr

from ...models.blog_post import (
    MUTABLE_FIELDS,
    Author,
    BlogPost,
    BlogPostDraft,
    NonEmptyStr,
    UtcTimestamp,
)


class BlogPostResponse(BaseModel):
    """포스트 응답 DTO (wire 표현).

    author 는 "firstName lastName" 문자열로, created 는 UTC ISO8601 문자열로 내보낸다.
    """

    id: ObjectIdStr
    title: str
    content: str
    author: str
    created: UtcDateTime

    @classmethod
    def from_domain(cls, post: BlogPost) -> "BlogPostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author=post.author.full_name,
            created=post.created,
        )


class BlogPostCreateRequest(BaseModel):
    """포스트 생성 요청 DTO.

    - id 는 받더라도 무시한다 (저장소가 부여).
    - created 는 선택값이며, 없으면 생성 시각을 사용한다.
    """

    model_config = ConfigDict(extra="ignore")

    title: NonEmptyStr
    content: NonEmptyStr
    author: Author
    created: UtcTimestamp | None = None

    def to_draft(self) -> BlogPostDraft:
        data: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "author": self.author,
        }
        if self.created is not None:
            data["created"] = self.created
        return BlogPostDraft(**data)


class BlogPostUpdateRequest(BaseModel):
    """포스트 부분 수정 요청 DTO.

    요청 바디에 실제로 들어온 키만 변경 대상으로 본다 (model_fields_set).
    알 수 없는 키는 무시한다.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: NonEmptyStr | None = None
    content: NonEmptyStr | None = None
    author: Author | None = None
    # 형식 검사만 하고 반영하지 않는다. created 는 생성 이후 불변이다.
    created: UtcTimestamp | None = None

    @field_validator("author", mode="before")
    @classmethod
    def _accept_legacy_author_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Author.from_full_name(value)
        return value

    @field_validator("title", "content", "author", mode="after")
    @classmethod
    def _reject_explicit_null(cls, value: Any) -> Any:
        # 기본값(None)에는 호출되지 않으므로, 여기 들어온 None 은 바디의 명시적 null 이다.
        if value is None:
            raise ValueError("must not be null")
        return value

    def to_changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in MUTABLE_FIELDS
            if name in self.model_fields_set
        }


def describe_validation_errors(
    errors: Sequence[Any],
) -> tuple[str, list[dict[str, str]]]:
    """pydantic/FastAPI 검증 에러 목록을 필드 단위 메시지로 정리한다.

    loc 의 "body" 접두어는 떼고 "author.firstName" 처럼 점으로 잇는다.
    """

    items: list[dict[str, str]] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(loc) or "body"
        items.append({"field": field, "message": str(error.get("msg", "invalid"))})

    fields = sorted({item["field"] for item in items})
    return f"invalid or missing field(s): {', '.join(fields)}", items
