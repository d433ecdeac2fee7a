"""
Configuration settings for the surf forecast ingestion pipeline.
"""
import logging
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Surf Forecast Ingestion"
    app_version: str = "1.0.0"
    debug: bool = False

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api"

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./surf_forecasts.db",
        description="Database connection URL"
    )
    database_echo: bool = False

    # Open-Meteo sources
    marine_api_url: str = "https://marine-api.open-meteo.com/v1/marine"
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    forecast_source: str = "open-meteo"

    # Data Collection Settings
    forecast_horizon_hours: int = 48
    max_forecast_days: int = 7  # Open-Meteo serves up to 168 hours here
    fetch_interval_minutes: int = 30
    max_concurrent_spots: int = 4
    request_timeout_seconds: float = 30.0
    provider_total_timeout_seconds: float = 60.0
    run_on_startup: bool = True

    # Forecast store writes
    upsert_chunk_size: int = 500
    store_write_retries: int = 3
    store_retry_delay_seconds: float = 1.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"  # Ignore extra env vars not defined in the model
    }


# Hourly fields requested from the marine provider, mapped to record fields
MARINE_FIELDS = {
    "wave_height": "wave_height",
    "wave_period": "wave_period",
    "wave_direction": "wave_direction",
    "swell_wave_height": "swell_height",
    "swell_wave_period": "swell_period",
    "swell_wave_direction": "swell_direction",
}

# Wave fields are always stored; a missing value becomes 0
REQUIRED_MARINE_FIELDS = ("wave_height", "wave_period", "wave_direction")

# Hourly fields requested from the weather provider, mapped to record fields
WEATHER_FIELDS = {
    "wind_speed_10m": "wind_speed",
    "wind_gusts_10m": "wind_gusts",
    "wind_direction_10m": "wind_direction",
}

# Seed spots, loaded into the spots table by `python -m surf_forecast_ingest seed`
SURF_SPOTS = {
    "4f6b2c1e-8f0a-4d3b-9a57-2f1d6c0b7e11": {
        "name": "Yangyang Surfyy Beach",
        "lat": 38.0276,
        "lon": 128.7195,
        "is_active": True,
    },
    "9b3e7a52-1c4d-4e8f-b6a0-5d2c8f1e3a77": {
        "name": "Jungmun Saekdal Beach",
        "lat": 33.2445,
        "lon": 126.4120,
        "is_active": True,
    },
    "c2d8e4f6-7a1b-4c3d-8e9f-0a1b2c3d4e5f": {
        "name": "Songjeong Beach",
        "lat": 35.1786,
        "lon": 129.1997,
        "is_active": True,
    },
    "e7f1a3b5-2c4d-4e6f-9a8b-7c6d5e4f3a21": {
        "name": "Kuta Beach",
        "lat": -8.7180,
        "lon": 115.1686,
        "is_active": True,
    },
}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=settings.log_format
    )
