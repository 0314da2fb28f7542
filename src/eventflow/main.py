"""EventFlow main application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from eventflow.api import router
from eventflow.config import settings
from eventflow.db.base import close_db, init_db
from eventflow.tasks.sweep import start_lifecycle_sweep, stop_lifecycle_sweep

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("eventflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting EventFlow server...")
    logger.info(f"Environment: {settings.env.value}")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    # Start background tasks
    if settings.sweep_enabled:
        await start_lifecycle_sweep()
        logger.info("Lifecycle sweep task started")

    yield

    # Cleanup
    logger.info("Shutting down EventFlow server...")
    if settings.sweep_enabled:
        await stop_lifecycle_sweep()
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="EventFlow",
    description="Group event planning: lifecycle, preference consensus and venue recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

# Include API router
app.include_router(router)


def main():
    """Entry point for the application."""
    uvicorn.run(
        "eventflow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
