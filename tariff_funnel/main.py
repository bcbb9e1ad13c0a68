"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tariff_funnel.config import get_settings
from tariff_funnel.state.manager import get_database_manager
from tariff_funnel.state.seed import seed_reference_data
from tariff_funnel.utils.logging import get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("application_starting")
    settings = get_settings()

    database = await get_database_manager()
    if settings.auto_create_schema:
        await database.create_schema()
    if settings.seed_reference_data:
        await seed_reference_data(database)
    logger.info("database_initialized", environment=settings.environment)

    yield

    # Shutdown
    logger.info("application_shutting_down")
    await database.disconnect()


# Create FastAPI app
app = FastAPI(
    title="Enfinitus Tariff Funnel",
    description="Electricity tariff pricing, registration and contract drafts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "tariff-funnel"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Enfinitus Tariff Funnel API",
        "docs": "/docs",
        "health": "/health",
    }


# Import and include routers
from tariff_funnel.api import register_exception_handlers, router

app.include_router(router, prefix="/api/v1", tags=["api"])
register_exception_handlers(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tariff_funnel.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
