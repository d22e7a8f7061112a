from fastapi import APIRouter

from vision_metadata.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "app": settings.app_name, "vision_provider": settings.vision_provider}
