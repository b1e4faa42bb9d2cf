from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...exceptions import PostValidationError
from ...services.posts_service import PostsService, get_posts_service

from ..schemas.posts import (
    BlogPostCreateRequest,
    BlogPostResponse,
    BlogPostUpdateRequest,
)


router = APIRouter()


# PostNotFoundError(404), PostValidationError(400), StoreUnavailableError(503) 는
# main 의 예외 핸들러가 응답으로 바꾼다.
# 핸들러는 일반 def 로 두어 pymongo 의 블로킹 호출이 스레드풀에서 실행되게 한다.


@router.get(
    "",
    response_model=list[BlogPostResponse],
    summary="포스트 목록 조회",
    description="저장된 모든 포스트를 반환한다. 없으면 빈 배열을 반환한다.",
)
def list_posts(
    service: PostsService = Depends(get_posts_service),
) -> list[BlogPostResponse]:
    return [BlogPostResponse.from_domain(post) for post in service.list_posts()]


@router.get(
    "/{post_id}",
    response_model=BlogPostResponse,
    summary="단일 포스트 조회",
    description="post_id로 포스트를 조회한다.",
)
def get_post(
    post_id: str,
    service: PostsService = Depends(get_posts_service),
) -> BlogPostResponse:
    post = service.get_post(post_id)
    return BlogPostResponse.from_domain(post)


@router.post(
    "",
    response_model=BlogPostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="포스트 생성",
    description=(
        "title, content, author{firstName,lastName} 는 필수다. "
        "created 를 생략하면 생성 시각을 사용한다."
    ),
)
def create_post(
    body: BlogPostCreateRequest,
    service: PostsService = Depends(get_posts_service),
) -> BlogPostResponse:
    post = service.create_post(body.to_draft())
    return BlogPostResponse.from_domain(post)


@router.put(
    "/{post_id}",
    response_model=BlogPostResponse,
    summary="포스트 부분 수정",
    description=(
        "바디에 포함된 필드(title, content, author)만 덮어쓰고 "
        "수정된 포스트를 반환한다."
    ),
)
def update_post(
    post_id: str,
    body: BlogPostUpdateRequest,
    service: PostsService = Depends(get_posts_service),
) -> BlogPostResponse:
    # ObjectId 문자열은 16진수라 대소문자만 다른 ID 는 같은 포스트를 가리킨다.
    if body.id is not None and body.id.lower() != post_id.lower():
        raise PostValidationError(
            f"request path id ({post_id}) and request body id ({body.id}) must match",
        )

    post = service.update_post(post_id, body.to_changes())
    return BlogPostResponse.from_domain(post)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="포스트 삭제",
    description="포스트를 삭제한다. 이미 없는 포스트면 404 를 반환한다.",
)
def delete_post(
    post_id: str,
    service: PostsService = Depends(get_posts_service),
) -> Response:
    service.delete_post(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
