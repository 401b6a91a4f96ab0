"""
Board Portal API Routes

FastAPI route handlers for the board portal engine.
"""
from .health import router as health_router
from .sessions import router as sessions_router
from .meetings import router as meetings_router
from .tasks import router as tasks_router
from .notifications import router as notifications_router
from .directory import router as directory_router
from .audit import router as audit_router

__all__ = [
    'health_router',
    'sessions_router',
    'meetings_router',
    'tasks_router',
    'notifications_router',
    'directory_router',
    'audit_router',
]
