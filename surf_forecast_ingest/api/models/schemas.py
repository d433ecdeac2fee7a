"""
Pydantic schemas for API responses.
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field


class SpotOutcome(BaseModel):
    """Outcome of one spot within a run."""
    spot_id: str
    spot_name: str = ""
    status: str = Field(..., description="succeeded, failed or skipped")
    records_written: int = 0
    weather_degraded: bool = Field(False, description="Wind fields were written as null")
    error: Optional[str] = None
    duration_seconds: float = 0.0


class RunSummaryResponse(BaseModel):
    """Summary of one ingestion run."""
    run_id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    fetched_at: datetime
    cancelled: bool = False
    spots_attempted: int
    spots_succeeded: int
    spots_failed: int
    spots_skipped: int = 0
    records_written: int
    duration_seconds: float
    results: List[SpotOutcome] = []

    class Config:
        json_schema_extra = {
            "example": {
                "run_id": "5f0c2b8e9d7a4c1f8e2b3a6d4c9e1f07",
                "started_at": "2026-06-01T06:00:00+00:00",
                "finished_at": "2026-06-01T06:00:03.412000+00:00",
                "fetched_at": "2026-06-01T06:00:00+00:00",
                "cancelled": False,
                "spots_attempted": 2,
                "spots_succeeded": 2,
                "spots_failed": 0,
                "spots_skipped": 0,
                "records_written": 96,
                "duration_seconds": 3.412,
                "results": [
                    {
                        "spot_id": "4f6b2c1e-8f0a-4d3b-9a57-2f1d6c0b7e11",
                        "spot_name": "Yangyang Surfyy Beach",
                        "status": "succeeded",
                        "records_written": 48,
                        "weather_degraded": False,
                        "error": None,
                        "duration_seconds": 1.702,
                    }
                ],
            }
        }


class RunHistoryEntry(BaseModel):
    run_id: str
    started_at: datetime
    spots_attempted: int
    spots_succeeded: int
    spots_failed: int
    records_written: int
    cancelled: bool = False


class ScheduledJob(BaseModel):
    id: str
    name: str
    next_run_time: Optional[datetime] = None


class IngestionStatusResponse(BaseModel):
    """Scheduler state and recent ingestion runs."""
    is_running: bool = Field(..., description="Scheduler is started")
    run_in_progress: bool = Field(..., description="An ingestion run is active right now")
    interval_minutes: int
    jobs: List[ScheduledJob] = []
    last_error: Optional[str] = None
    last_run: Optional[RunSummaryResponse] = None
    recent_history: List[RunHistoryEntry] = []


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    scheduler_running: bool
