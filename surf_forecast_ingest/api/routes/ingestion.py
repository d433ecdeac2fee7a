"""
Ingestion control API routes.
"""
import logging

from fastapi import APIRouter, HTTPException, Request

from surf_forecast_ingest.api.models.schemas import (
    IngestionStatusResponse,
    RunSummaryResponse,
)
from surf_forecast_ingest.exceptions import IngestionAlreadyRunning
from surf_forecast_ingest.ingestion.manager import IngestionManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_manager(request: Request) -> IngestionManager:
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Ingestion service is initializing")
    return manager


@router.get("/status", response_model=IngestionStatusResponse)
async def get_ingestion_status(request: Request):
    """Get scheduler state, the last run and recent run history."""
    return _get_manager(request).scheduler.get_status()


@router.post("/run", response_model=RunSummaryResponse)
async def trigger_ingestion_run(request: Request):
    """
    Run one ingestion pass now and return its summary.

    Responds 409 if a scheduled or manual run is still in progress.
    """
    manager = _get_manager(request)
    try:
        summary = await manager.scheduler.run_now()
    except IngestionAlreadyRunning as e:
        logger.warning(f"Manual ingestion rejected: {e.message}")
        raise HTTPException(status_code=409, detail=e.message)
    return summary.to_dict()
