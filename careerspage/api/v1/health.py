# careerspage/api/v1/health.py

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/")
async def read_root():
    return {
        "message": "Careers Page Builder API",
        "status": "running",
        "endpoints": {"event": "/api/event", "health": "/health", "docs": "/docs"},
    }
