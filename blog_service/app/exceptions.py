from __future__ import annotations


class BlogServiceError(Exception):
    """Base exception for all blog-service errors."""


class PostValidationError(BlogServiceError):
    """Client supplied data fails shape or required-field checks."""


class PostNotFoundError(BlogServiceError):
    """The target post does not exist or its id is not a valid identifier."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"post not found: {post_id}")
        self.post_id = post_id


class StoreUnavailableError(BlogServiceError):
    """The document store is unreachable or the call timed out."""
