from fastapi import APIRouter

from glance.schemas.common import APIResponse, ok


router = APIRouter(tags=["health"])


@router.get("/health", response_model=APIResponse, summary="Liveness check")
async def health() -> APIResponse:
    return ok({"status": "ok"})
