"""Shared fixtures for the surf forecast ingestion tests."""
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from surf_forecast_ingest.config.settings import Settings
from surf_forecast_ingest.storage import create_engine, create_session_factory, init_db

MARINE_URL = "https://marine.test/v1/marine"
WEATHER_URL = "https://weather.test/v1/forecast"

SPOT_ID = "4f6b2c1e-8f0a-4d3b-9a57-2f1d6c0b7e11"
OTHER_SPOT_ID = "9b3e7a52-1c4d-4e8f-b6a0-5d2c8f1e3a77"

TEST_SPOTS = {
    SPOT_ID: {"name": "Yangyang Surfyy Beach", "lat": 38.0276, "lon": 128.7195, "is_active": True},
    OTHER_SPOT_ID: {"name": "Jungmun Saekdal Beach", "lat": 33.2445, "lon": 126.4120, "is_active": True},
}


def hourly_times(count: int, start_hour: int = 0, day: str = "2024-06-01") -> List[str]:
    return [f"{day}T{h:02d}:00" for h in range(start_hour, start_hour + count)]


def marine_payload(
    times: List[str],
    wave_height: Optional[List[Any]] = None,
    omit: tuple = (),
    utc_offset_seconds: int = 0,
) -> Dict[str, Any]:
    """Open-Meteo marine response body."""
    n = len(times)
    hourly = {
        "time": times,
        "wave_height": wave_height if wave_height is not None else [1.5] * n,
        "wave_period": [9.0] * n,
        "wave_direction": [270.0] * n,
        "swell_wave_height": [1.1] * n,
        "swell_wave_period": [11.0] * n,
        "swell_wave_direction": [265.0] * n,
    }
    for name in omit:
        hourly.pop(name)
    return {
        "latitude": 38.0,
        "longitude": 128.75,
        "utc_offset_seconds": utc_offset_seconds,
        "timezone": "GMT",
        "hourly": hourly,
    }


def weather_payload(
    times: List[str],
    wind_speed: Optional[List[Any]] = None,
    utc_offset_seconds: int = 0,
) -> Dict[str, Any]:
    """Open-Meteo forecast response body with wind fields."""
    n = len(times)
    return {
        "latitude": 38.0,
        "longitude": 128.75,
        "utc_offset_seconds": utc_offset_seconds,
        "timezone": "GMT",
        "hourly": {
            "time": times,
            "wind_speed_10m": wind_speed if wind_speed is not None else [12.0] * n,
            "wind_gusts_10m": [18.0] * n,
            "wind_direction_10m": [300.0] * n,
        },
    }


def open_meteo_transport(marine=None, weather=None, requests: Optional[list] = None):
    """
    MockTransport routing marine and weather URLs.

    `marine` / `weather` may be a payload dict, an httpx.Response, or an
    exception instance to raise.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        target = marine if request.url.host == "marine.test" else weather
        if isinstance(target, Exception):
            raise target
        if isinstance(target, httpx.Response):
            return target
        return httpx.Response(200, json=target)

    return httpx.MockTransport(handler)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'forecasts.db'}",
        marine_api_url=MARINE_URL,
        weather_api_url=WEATHER_URL,
        forecast_horizon_hours=48,
        run_on_startup=False,
        store_write_retries=2,
        store_retry_delay_seconds=0.0,
        request_timeout_seconds=5.0,
        provider_total_timeout_seconds=5.0,
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
