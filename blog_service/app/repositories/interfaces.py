from __future__ import annotations

from typing import Any, Protocol

from ..models.blog_post import BlogPost, BlogPostDraft


class BlogPostRepositoryInterface(Protocol):
    """BlogPostRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    ID 는 항상 불투명한 문자열로 주고받는다.

    - 존재하지 않거나 형식이 맞지 않는 ID 는 PostNotFoundError
    - 저장소 연결/타임아웃 실패는 StoreUnavailableError
    """

    def insert(self, draft: BlogPostDraft) -> BlogPost:  # pragma: no cover - Protocol
        ...

    def list(self) -> list[BlogPost]:  # pragma: no cover - Protocol
        ...

    def find_by_id(self, id_value: str) -> BlogPost:  # pragma: no cover - Protocol
        ...

    def update_by_id(
        self, id_value: str, changes: dict[str, Any]
    ) -> BlogPost:  # pragma: no cover - Protocol
        """changes 에 포함된 필드만 덮어쓰고 갱신된 포스트를 반환한다."""
        ...

    def delete_by_id(self, id_value: str) -> None:  # pragma: no cover - Protocol
        ...
