from datetime import datetime, timezone

from fastapi import APIRouter

from datasprint.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "message": f"{settings.event_name} backend is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
