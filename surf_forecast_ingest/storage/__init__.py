"""
Forecast store: ORM tables, engine setup and idempotent writes.
"""
from .models import Base, SpotRow, ForecastRow, UPSERT_UPDATE_COLUMNS
from .database import create_engine, create_session_factory, init_db
from .forecast_writer import ForecastUpsertWriter, seed_spots, count_forecasts

__all__ = [
    "Base",
    "SpotRow",
    "ForecastRow",
    "UPSERT_UPDATE_COLUMNS",
    "create_engine",
    "create_session_factory",
    "init_db",
    "ForecastUpsertWriter",
    "seed_spots",
    "count_forecasts",
]
