"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import admin, auth, flats, health, readings, reports, users
from app.api.routes import settings as settings_routes
from app.core.config import settings
from app.core.database import Base, engine
from app.core.logging import configure_logging

# Import models for Base.metadata.create_all - order matters for foreign keys
from app.models import (
    flat,  # noqa: F401
    reading,  # noqa: F401
    tariff_settings,  # noqa: F401
    user,  # noqa: F401
)

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup: Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    # Shutdown: cleanup if needed


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Monthly meter readings and bills for apartment flats",
    lifespan=lifespan,
)

# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(flats.router, prefix="/api")
app.include_router(readings.router, prefix="/api")
app.include_router(settings_routes.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
