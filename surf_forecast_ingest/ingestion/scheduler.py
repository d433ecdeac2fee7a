"""
Scheduler for periodic forecast ingestion runs.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from surf_forecast_ingest.config.settings import Settings, get_settings
from surf_forecast_ingest.exceptions import IngestionAlreadyRunning
from surf_forecast_ingest.models import RunSummary
from .pipeline import ForecastIngestionPipeline

logger = logging.getLogger(__name__)

JOB_ID = "forecast_ingestion"
HISTORY_SIZE = 20


class ForecastScheduler:
    """
    Runs the ingestion pipeline on a fixed interval.

    Handles:
    - Regular runs at the configured interval, never overlapping
    - Manual runs on demand
    - Status tracking and run history
    """

    def __init__(
        self,
        pipeline: ForecastIngestionPipeline,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.pipeline = pipeline
        self.scheduler = AsyncIOScheduler()

        # Status tracking
        self._history: List[RunSummary] = []
        self._callbacks: List[Callable] = []
        self._last_error: Optional[str] = None

        # Running state
        self._is_running = False

    def add_callback(self, callback: Callable):
        """Add a callback to be called with each completed RunSummary."""
        self._callbacks.append(callback)

    async def _notify_callbacks(self, summary: RunSummary):
        """Notify all registered callbacks of a finished run."""
        for callback in self._callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback(summary)
                else:
                    callback(summary)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    async def run_now(self) -> RunSummary:
        """
        Run one ingestion pass immediately.

        Raises:
            IngestionAlreadyRunning: if a run is still in progress
        """
        summary = await self.pipeline.run()

        self._history.append(summary)
        del self._history[:-HISTORY_SIZE]
        self._last_error = None

        await self._notify_callbacks(summary)
        return summary

    async def run_ingestion_job(self):
        """Scheduled job for forecast ingestion."""
        logger.info("Running scheduled forecast ingestion")

        try:
            await self.run_now()
        except IngestionAlreadyRunning:
            logger.warning("Previous ingestion run still in progress, skipping this tick")
        except Exception as e:
            self._last_error = f"{type(e).__name__}: {e}"
            logger.exception("Scheduled forecast ingestion failed")

    def start(self):
        """Start the scheduler with the ingestion job."""
        if self._is_running:
            logger.warning("Scheduler is already running")
            return

        interval = self.settings.fetch_interval_minutes
        job_options: Dict[str, Any] = {}
        if self.settings.run_on_startup:
            job_options["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            self.run_ingestion_job,
            IntervalTrigger(minutes=interval),
            id=JOB_ID,
            name="Forecast Ingestion",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_options
        )

        self.scheduler.start()
        self._is_running = True

        logger.info(f"Scheduler started with {interval} minute intervals")

    def stop(self):
        """Stop the scheduler; an in-flight run finishes its started spots."""
        if self._is_running:
            if self.pipeline.is_running:
                self.pipeline.request_stop()
            self.scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("Scheduler stopped")

    @property
    def last_run(self) -> Optional[RunSummary]:
        return self._history[-1] if self._history else None

    def get_status(self) -> Dict[str, Any]:
        """Get current scheduler status."""
        return {
            "is_running": self._is_running,
            "run_in_progress": self.pipeline.is_running,
            "interval_minutes": self.settings.fetch_interval_minutes,
            "jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                }
                for job in self.scheduler.get_jobs()
            ] if self._is_running else [],
            "last_error": self._last_error,
            "last_run": self.last_run.to_dict() if self.last_run else None,
            "recent_history": [
                {
                    "run_id": s.run_id,
                    "started_at": s.started_at.isoformat(),
                    "spots_attempted": s.spots_attempted,
                    "spots_succeeded": s.spots_succeeded,
                    "spots_failed": s.spots_failed,
                    "records_written": s.records_written,
                    "cancelled": s.cancelled,
                }
                for s in self._history[-10:]
            ]
        }
