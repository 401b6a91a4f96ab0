"""
Health Check Routes

Endpoints for service health monitoring.
"""
from fastapi import APIRouter
from datetime import datetime

from ..services.engine_service import get_engine_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "boardportal-engine",
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness check - storages initialized and change feed listening.
    """
    engine = get_engine_service()
    return {
        "ready": engine.is_initialized,
        "change_feed": engine.change_feed.is_connected,
        "sessions": engine.sessions.active_count,
        "timestamp": datetime.utcnow().isoformat()
    }
