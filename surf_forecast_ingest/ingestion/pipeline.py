"""
Ingestion orchestrator: fetch, merge and upsert forecasts for every active spot.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from surf_forecast_ingest.config.settings import Settings, get_settings
from surf_forecast_ingest.exceptions import (
    IngestionAlreadyRunning,
    PrimarySeriesFailure,
    ProviderError,
    SecondarySeriesFailure,
    SpotIngestionError,
)
from surf_forecast_ingest.models import (
    MergedForecastRecord,
    ProviderKind,
    RawSeries,
    RunSummary,
    Spot,
    SpotResult,
    SpotStatus,
)
from .merger import SeriesMerger
from .open_meteo_client import OpenMeteoClient
from .spot_directory import SpotDirectory

logger = logging.getLogger(__name__)


class ForecastIngestionPipeline:
    """
    Drives one ingestion run across all active spots.

    Each spot is an isolated unit of work: its outcome is collected as a
    SpotResult and never aborts the run. A marine failure skips the spot;
    a weather failure only nulls the wind fields. Spots run concurrently up
    to `max_concurrent_spots`.

    The writer is any object with an async `upsert(records) -> int`.
    """

    def __init__(
        self,
        directory: SpotDirectory,
        client: OpenMeteoClient,
        writer,
        merger: Optional[SeriesMerger] = None,
        settings: Optional[Settings] = None,
        horizon_hours: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        self.directory = directory
        self.client = client
        self.writer = writer
        self.merger = merger or SeriesMerger(source=client.describe())
        self.horizon_hours = horizon_hours or self.settings.forecast_horizon_hours

        self._run_lock = asyncio.Lock()
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def request_stop(self):
        """Let in-flight spots finish but start no new ones in the current run."""
        self._stop_requested = True
        logger.info("Stop requested; no new spots will be started")

    async def run(self) -> RunSummary:
        """
        Run fetch -> merge -> upsert for every active spot.

        Returns:
            RunSummary with one SpotResult per active spot

        Raises:
            IngestionAlreadyRunning: if a previous run has not finished
        """
        if self._run_lock.locked():
            raise IngestionAlreadyRunning()

        async with self._run_lock:
            try:
                return await self._run()
            finally:
                self._stop_requested = False

    async def _run(self) -> RunSummary:
        now = datetime.now(timezone.utc)
        summary = RunSummary(started_at=now, fetched_at=now)

        logger.info(f"Starting forecast ingestion run {summary.run_id}")

        spots = await self.directory.list_active_spots()
        if not spots:
            logger.warning("No active spots found, skipping forecast fetch")
            summary.finished_at = datetime.now(timezone.utc)
            return summary

        semaphore = asyncio.Semaphore(max(1, self.settings.max_concurrent_spots))
        tasks = [
            self._ingest_with_limit(spot, semaphore, summary.fetched_at)
            for spot in spots
        ]
        summary.results = list(await asyncio.gather(*tasks))
        summary.cancelled = self._stop_requested
        summary.finished_at = datetime.now(timezone.utc)

        logger.info(
            f"Forecast ingestion run {summary.run_id} completed: "
            f"{summary.spots_succeeded}/{summary.spots_attempted} succeeded, "
            f"{summary.spots_failed} failed, {summary.spots_skipped} skipped, "
            f"{summary.records_written} records in {summary.duration_seconds:.1f}s"
        )
        for spot_id, reason in summary.failures.items():
            logger.warning(f"  {spot_id}: {reason}")

        return summary

    async def _ingest_with_limit(
        self,
        spot: Spot,
        semaphore: asyncio.Semaphore,
        fetched_at: datetime,
    ) -> SpotResult:
        async with semaphore:
            if self._stop_requested:
                return SpotResult(
                    spot_id=spot.id,
                    spot_name=spot.name,
                    status=SpotStatus.SKIPPED,
                    error="run stopped before this spot started",
                )
            return await self.ingest_spot(spot, fetched_at)

    async def ingest_spot(self, spot: Spot, fetched_at: datetime) -> SpotResult:
        """
        Fetch both series for one spot, merge them and upsert the batch.

        The batch is written only after it has been fully merged.
        """
        started = time.monotonic()

        try:
            records, weather_degraded = await self.fetch_and_merge(spot, fetched_at)
            written = await self.writer.upsert(records)
        except SpotIngestionError as e:
            logger.error(f"Failed to fetch forecast for spot: {spot.label} - {e.message}")
            return SpotResult(
                spot_id=spot.id,
                spot_name=spot.name,
                status=SpotStatus.FAILED,
                error=e.message,
                duration_seconds=time.monotonic() - started,
            )
        except Exception as e:
            logger.exception(f"Unexpected error ingesting spot: {spot.label}")
            return SpotResult(
                spot_id=spot.id,
                spot_name=spot.name,
                status=SpotStatus.FAILED,
                error=f"{type(e).__name__}: {e}",
                duration_seconds=time.monotonic() - started,
            )

        logger.info(
            f"Upserted {written} forecasts for spot: {spot.label}"
            + (" (wind unavailable)" if weather_degraded else "")
        )
        return SpotResult(
            spot_id=spot.id,
            spot_name=spot.name,
            status=SpotStatus.SUCCEEDED,
            records_written=written,
            weather_degraded=weather_degraded,
            duration_seconds=time.monotonic() - started,
        )

    async def fetch_and_merge(
        self,
        spot: Spot,
        fetched_at: datetime,
    ) -> Tuple[List[MergedForecastRecord], bool]:
        """
        Fetch marine and weather concurrently and merge them once both settle.

        Returns:
            (records, weather_degraded)

        Raises:
            PrimarySeriesFailure: the marine call failed
        """
        marine_result, weather_result = await asyncio.gather(
            self.client.fetch_series(
                ProviderKind.MARINE, spot.latitude, spot.longitude, self.horizon_hours
            ),
            self.client.fetch_series(
                ProviderKind.WEATHER, spot.latitude, spot.longitude, self.horizon_hours
            ),
            return_exceptions=True,
        )

        if isinstance(marine_result, ProviderError):
            raise PrimarySeriesFailure(spot.id, marine_result) from marine_result
        if isinstance(marine_result, BaseException):
            raise marine_result

        weather: Optional[RawSeries] = None
        weather_degraded = False
        if isinstance(weather_result, ProviderError):
            failure = SecondarySeriesFailure(spot.id, weather_result)
            logger.warning(f"{failure.message}; wind data will be null")
            weather_degraded = True
        elif isinstance(weather_result, BaseException):
            raise weather_result
        else:
            weather = weather_result

        if logger.isEnabledFor(logging.DEBUG):
            report = self.merger.alignment_report(marine_result, weather)
            logger.debug(f"Time axis alignment for spot {spot.label}: {report}")

        records = self.merger.merge(
            spot.id,
            marine_result,
            weather,
            self.horizon_hours,
            fetched_at,
        )
        return records, weather_degraded
