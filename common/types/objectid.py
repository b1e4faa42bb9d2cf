from __future__ import annotations

from typing import Annotated, Any

from pydantic.functional_validators import BeforeValidator


def _to_object_id_str(value: Any) -> Any:
    """Mongo ObjectId 등을 API 경계에서 쓰는 불투명 문자열 ID 로 바꾼다.

    None 이나 이미 문자열인 값은 그대로 둔다.
    """

    if value is None or isinstance(value, str):
        return value
    return str(value)


ObjectIdStr = Annotated[str, BeforeValidator(_to_object_id_str)]
