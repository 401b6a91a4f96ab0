"""
Board Portal Engine Application

FastAPI application for the board portal orchestration layer.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .services.engine_service import get_engine_service, init_engine_service
from .routes import (
    health_router,
    sessions_router,
    meetings_router,
    tasks_router,
    notifications_router,
    directory_router,
    audit_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("boardportal.app")

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)

# Create FastAPI application
app = FastAPI(
    title="Board Portal Engine API",
    description="Meetings, action items, notifications and member directory for the board portal",
    version="0.1.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info("Starting Board Portal Engine...")

    try:
        await init_engine_service()
        logger.info("Board Portal Engine started successfully")
    except Exception as e:
        logger.error(f"Failed to start Board Portal Engine: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Board Portal Engine...")

    try:
        engine = get_engine_service()
        await engine.close()
        logger.info("Board Portal Engine shutdown complete")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# Include routers
app.include_router(health_router, prefix="/api/v1", tags=["health"])
app.include_router(sessions_router, prefix="/api/v1", tags=["sessions"])
app.include_router(meetings_router, prefix="/api/v1", tags=["meetings"])
app.include_router(tasks_router, prefix="/api/v1", tags=["tasks"])
app.include_router(notifications_router, prefix="/api/v1", tags=["notifications"])
app.include_router(directory_router, prefix="/api/v1", tags=["directory"])
app.include_router(audit_router, prefix="/api/v1", tags=["audit"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Board Portal Engine",
        "version": "0.1.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=Config.API_HOST,
        port=Config.API_PORT
    )
