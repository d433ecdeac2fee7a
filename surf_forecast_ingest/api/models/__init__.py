"""API response models."""
from .schemas import (
    SpotOutcome,
    RunSummaryResponse,
    RunHistoryEntry,
    ScheduledJob,
    IngestionStatusResponse,
    HealthResponse,
)

__all__ = [
    "SpotOutcome",
    "RunSummaryResponse",
    "RunHistoryEntry",
    "ScheduledJob",
    "IngestionStatusResponse",
    "HealthResponse",
]
