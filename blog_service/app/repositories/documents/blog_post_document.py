from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from common.mongo.types import BaseDocument, MongoDateTime, from_object_id, truncate_to_millis

from ...models.blog_post import Author, BlogPost, BlogPostDraft


class AuthorDocument(BaseModel):
    """author 서브 도큐먼트. 저장 필드명은 firstName/lastName 이다."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")


class BlogPostDocument(BaseDocument):
    """MongoDB blogposts 컬렉션 도큐먼트 모델."""

    title: str
    content: str
    author: AuthorDocument
    created: MongoDateTime

    @classmethod
    def from_draft(cls, draft: BlogPostDraft) -> "BlogPostDocument":
        return cls(
            title=draft.title,
            content=draft.content,
            author=AuthorDocument(
                first_name=draft.author.first_name,
                last_name=draft.author.last_name,
            ),
            created=truncate_to_millis(draft.created),
        )

    def to_domain(self) -> BlogPost:
        return BlogPost(
            id=from_object_id(self.id) or "",
            title=self.title,
            content=self.content,
            author=Author(
                first_name=self.author.first_name,
                last_name=self.author.last_name,
            ),
            created=self.created,
        )
