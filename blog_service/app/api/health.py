from __future__ import annotations

from fastapi import APIRouter


router = APIRouter()


@router.get("/health", summary="헬스 체크")
async def health() -> dict[str, str]:
    """프로세스 생존 여부만 확인한다 (저장소 연결은 확인하지 않는다)."""
    return {"status": "ok"}
