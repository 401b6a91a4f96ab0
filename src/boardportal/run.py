"""
Board Portal Engine Runner

Entry point for running the board portal engine.
"""
import uvicorn
import logging
import os

from .config import Config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("boardportal")


def run():
    """Run the board portal engine"""
    logger.info(f"Starting Board Portal Engine on {Config.API_HOST}:{Config.API_PORT}")

    uvicorn.run(
        "boardportal.app:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=os.getenv("DEBUG", "false").lower() == "true"
    )


if __name__ == "__main__":
    run()
