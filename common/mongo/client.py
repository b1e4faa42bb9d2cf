from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_timeout_ms, get_mongo_uri


logger = logging.getLogger(__name__)


class MongoConnection:
    """프로세스 단위 MongoDB 연결의 명시적인 생명주기(open/close)를 관리한다.

    전역 싱글톤 대신 애플리케이션 lifespan 에서 인스턴스를 만들고,
    요청 핸들러에는 DI 로 Database 를 넘겨준다.

    - open(): MongoClient 생성, ping 으로 연결 검증, DB 선택, 인덱스 보장
    - close(): 클라이언트 종료 (여러 번 호출해도 안전)
    """

    def __init__(
        self,
        uri: str | None = None,
        db_name: str | None = None,
        timeout_ms: int | None = None,
        posts_collection: str = "blogposts",
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._timeout_ms = timeout_ms
        self._posts_collection = posts_collection
        self._client: Optional[MongoClient] = None
        self._db: Optional[Database] = None
        self._lock = threading.Lock()

    @property
    def database(self) -> Database:
        if self._db is None:
            raise RuntimeError("MongoDB connection is not open")
        return self._db

    @property
    def is_open(self) -> bool:
        return self._db is not None

    def open(self) -> Database:
        with self._lock:
            if self._db is not None:
                return self._db

            uri = self._uri or get_mongo_uri()
            timeout_ms = self._timeout_ms or get_mongo_timeout_ms()
            client: MongoClient = MongoClient(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                socketTimeoutMS=timeout_ms,
            )

            try:
                client.admin.command("ping")
            except Exception as exc:  # noqa: BLE001
                client.close()
                raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

            # MONGO_DB_NAME 우선, 없으면 URI의 기본 DB 사용
            db_name = self._db_name or get_mongo_db_name()
            try:
                db = client[db_name] if db_name else client.get_default_database()
            except Exception as exc:  # noqa: BLE001
                client.close()
                raise RuntimeError(
                    "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
                ) from exc

            try:
                ensure_indexes(db, self._posts_collection)
            except Exception as exc:  # noqa: BLE001
                logger.error("failed to ensure MongoDB indexes: %s", exc)
                client.close()
                raise

            self._client = client
            self._db = db
            logger.info(
                "MongoDB connected and indexes ensured (db=%s, timeout_ms=%d)",
                db.name,
                timeout_ms,
            )
            return db

    def close(self) -> None:
        with self._lock:
            if self._client is None:
                return
            self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")


def ensure_indexes(db: Database, posts_collection: str) -> None:
    """필수 인덱스를 생성한다.

    목록 조회 정렬(created desc, _id desc)에 맞춘 인덱스만 정의한다.
    중복 생성해도 MongoDB 가 처리하므로 idempotent 하다.
    """

    posts = db[posts_collection]

    posts.create_index(
        [("created", DESCENDING), ("_id", DESCENDING)],
        name="idx_created_id_desc",
    )
