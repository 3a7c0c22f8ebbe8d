"""FastAPI application exposing the synced catalog to the chat bot."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from app.api.catalog import router as catalog_router
from app.config import settings
from app.database import engine
from app.models.restaurant import Base

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting application...")

    # Create database tables (for development - the sync CLI does it otherwise)
    if settings.app_env == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Coffeemania Catalog",
    description="Read-only menu and restaurant data for the Coffeemania chat bot",
    version="1.0.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(catalog_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Status information
    """
    return {"status": "healthy", "environment": settings.app_env}
