"""
FastAPI application for the surf forecast ingestion service.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
import uvicorn

from surf_forecast_ingest.api.models.schemas import HealthResponse
from surf_forecast_ingest.api.routes import ingestion
from surf_forecast_ingest.config.settings import configure_logging, get_settings
from surf_forecast_ingest.ingestion.manager import IngestionManager

logger = logging.getLogger(__name__)


def create_app(
    manager: Optional[IngestionManager] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """
    Build the API app.

    Args:
        manager: Pre-built ingestion manager; one is created from settings if omitted
        start_scheduler: Start the periodic ingestion job on startup
    """
    settings = manager.settings if manager else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info(f"Starting {settings.app_name}...")

        app.state.manager = manager or IngestionManager(settings)
        await app.state.manager.startup(start_scheduler=start_scheduler)

        logger.info("Application startup complete")

        yield

        logger.info("Shutting down...")
        await app.state.manager.shutdown()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Scheduled ingestion of merged hourly surf forecasts per spot.",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.manager = None

    app.include_router(
        ingestion.router,
        prefix=f"{settings.api_prefix}/ingestion",
        tags=["Ingestion"]
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        current = app.state.manager
        return {
            "status": "healthy" if current else "initializing",
            "timestamp": datetime.now(timezone.utc),
            "version": settings.app_version,
            "scheduler_running": bool(current and current.scheduler.get_status()["is_running"]),
        }

    return app


def run_server():
    settings = get_settings()
    configure_logging()
    uvicorn.run(
        "surf_forecast_ingest.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run_server()
