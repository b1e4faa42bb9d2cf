from __future__ import annotations

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import MongoConnection

from .api.health import router as health_router
from .api.schemas.posts import describe_validation_errors
from .api.v1 import api_router
from .config import AppConfig, load_config
from .exceptions import PostNotFoundError, PostValidationError, StoreUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """MongoDB 연결을 시작 시 열고 종료 시 닫는다."""

    connection: MongoConnection = app.state.mongo
    connection.open()
    try:
        yield
    finally:
        connection.close()


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message, errors = describe_validation_errors(exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "errors": errors},
    )


async def _post_validation_handler(
    request: Request, exc: PostValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


async def _post_not_found_handler(
    request: Request, exc: PostNotFoundError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content={"detail": "post not found"}
    )


async def _store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    # 클라이언트에는 저장소 세부 정보 없이 error_id 만 돌려주고, 원인은 서버 로그에 남긴다.
    error_id = uuid.uuid4().hex[:8]
    logger.error(
        "store unavailable [%s]: %s",
        error_id,
        exc,
        exc_info=exc,
        extra={
            "error_id": error_id,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": f"storage temporarily unavailable. please try again later. (error id: {error_id})"
        },
    )


def create_app(
    config: AppConfig | None = None,
    connection: MongoConnection | None = None,
) -> FastAPI:
    setup_logger(name="blog-service")
    config = config or load_config()

    app = FastAPI(
        title="Blog Post Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.mongo = connection or MongoConnection(
        posts_collection=config.posts.collection
    )

    app.add_middleware(RequestTraceMiddleware)

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(PostValidationError, _post_validation_handler)
    app.add_exception_handler(PostNotFoundError, _post_not_found_handler)
    app.add_exception_handler(StoreUnavailableError, _store_unavailable_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


app = create_app()


def main() -> None:
    """명령행에서 실행할 수 있도록 uvicorn 런처를 제공한다."""

    import uvicorn

    port = int(os.getenv("BLOG_SERVICE_PORT", "8003"))
    uvicorn.run(
        "blog_service.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
