"""
Forecast ingestion: provider client, merge, orchestration and scheduling.
"""
from .open_meteo_client import OpenMeteoClient
from .merger import SeriesMerger
from .spot_directory import SpotDirectory, DatabaseSpotDirectory, StaticSpotDirectory
from .pipeline import ForecastIngestionPipeline
from .scheduler import ForecastScheduler
from .manager import IngestionManager

__all__ = [
    "OpenMeteoClient",
    "SeriesMerger",
    "SpotDirectory",
    "DatabaseSpotDirectory",
    "StaticSpotDirectory",
    "ForecastIngestionPipeline",
    "ForecastScheduler",
    "IngestionManager",
]
