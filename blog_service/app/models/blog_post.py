from __future__ import annotations

from datetime import datetime, timezone

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from common.mongo.types import ensure_utc_datetime


def _require_non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        # 짝이 없는 surrogate 같은 문자는 BSON 으로 저장할 수 없다.
        raise ValueError("must be valid unicode text") from exc
    return value


def _require_utc_representable(value: datetime) -> datetime:
    try:
        return ensure_utc_datetime(value)
    except OverflowError as exc:
        raise ValueError("timestamp is out of range when converted to UTC") from exc


NonEmptyStr = Annotated[str, AfterValidator(_require_non_blank)]
UtcTimestamp = Annotated[datetime, AfterValidator(_require_utc_representable)]


class Author(BaseModel):
    """작성자 복합 값. 내부에서는 항상 firstName/lastName 쌍으로 다룬다."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: NonEmptyStr = Field(alias="firstName")
    last_name: NonEmptyStr = Field(alias="lastName")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_full_name(cls, value: str) -> "Author":
        """'First Last' 형태의 레거시 문자열을 복합 값으로 되돌린다.

        공백 하나로 정확히 두 부분이 나뉘는 경우만 허용하고,
        그 외에는 이름을 복원할 수 없으므로 ValueError 를 발생시킨다.
        """

        parts = value.split(" ")
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise ValueError(
                "author string must be exactly 'firstName lastName'; "
                "use {firstName, lastName} instead"
            )
        return cls(first_name=parts[0], last_name=parts[1])


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlogPostDraft(BaseModel):
    """저장 전 검증을 통과한 새 포스트 (아직 id 없음)"""

    title: NonEmptyStr
    content: NonEmptyStr
    author: Author
    created: datetime = Field(default_factory=utc_now)


class BlogPost(BlogPostDraft):
    """블로그 포스트 도메인 모델 (API/저장소에서 공통 사용)"""

    id: str


# 부분 수정에서 덮어쓸 수 있는 필드. id, created 는 생성 이후 불변이다.
MUTABLE_FIELDS: frozenset[str] = frozenset({"title", "content", "author"})
