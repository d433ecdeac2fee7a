"""
Wiring of the forecast store, provider client, pipeline and scheduler.
"""
import logging
from typing import Optional

import httpx

from surf_forecast_ingest.config.settings import Settings, get_settings
from surf_forecast_ingest.storage import (
    ForecastUpsertWriter,
    create_engine,
    create_session_factory,
    init_db,
)
from .open_meteo_client import OpenMeteoClient
from .pipeline import ForecastIngestionPipeline
from .scheduler import ForecastScheduler
from .spot_directory import DatabaseSpotDirectory, SpotDirectory

logger = logging.getLogger(__name__)


class IngestionManager:
    """
    Owns the long-lived resources of the ingestion service.

    Call `startup()` before use and `shutdown()` when done; the API
    lifespan and the CLI both go through this class.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        directory: Optional[SpotDirectory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.engine = create_engine(self.settings)
        self.session_factory = create_session_factory(self.engine)

        self.client = OpenMeteoClient(self.settings, transport=transport)
        self.writer = ForecastUpsertWriter(self.session_factory, self.settings)
        self.directory = directory or DatabaseSpotDirectory(self.session_factory)

        self.pipeline = ForecastIngestionPipeline(
            self.directory,
            self.client,
            self.writer,
            settings=self.settings,
        )
        self.scheduler = ForecastScheduler(self.pipeline, self.settings)

    async def startup(self, start_scheduler: bool = True):
        await init_db(self.engine)
        if start_scheduler:
            self.scheduler.start()

    async def shutdown(self):
        self.scheduler.stop()
        await self.client.close()
        await self.engine.dispose()
        logger.info("Ingestion manager shut down")
