from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


DEFAULT_CONFIG_FILE_NAME = "config.yaml"
DEFAULT_POSTS_COLLECTION = "blogposts"


@dataclass(slots=True)
class PostsConfig:
    collection: str = DEFAULT_POSTS_COLLECTION


@dataclass(slots=True)
class AppConfig:
    """blog-service 전체 설정 루트.

    - 연결 정보(MONGO_URI 등)는 환경 변수에서 읽고, 여기에는 서비스 동작 설정만 둔다.
    """

    posts: PostsConfig = field(default_factory=PostsConfig)


def _find_config_path() -> Path | None:
    """현재 작업 디렉토리 기준으로 상위로 올라가며 config.yaml 을 찾는다."""

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def parse_config(data: dict, source: str = "<memory>") -> AppConfig:
    posts = data.get("posts") or {}
    if not isinstance(posts, dict):
        raise RuntimeError(f"invalid posts section in {source}: {posts!r}")

    collection = str(posts.get("collection") or DEFAULT_POSTS_COLLECTION).strip()
    if not collection or "$" in collection:
        raise RuntimeError(
            f"invalid posts.collection in {source}: {posts.get('collection')!r}",
        )

    return AppConfig(posts=PostsConfig(collection=collection))


def load_config(path: Path | None = None) -> AppConfig:
    """blog-service 설정을 로드하여 AppConfig 로 반환한다.

    config.yaml 이 없으면 기본값을 사용한다.
    """

    path = path or _find_config_path()
    if path is None:
        return AppConfig()

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise RuntimeError(f"{path} must contain a mapping at the top level")
    return parse_config(data, source=str(path))
