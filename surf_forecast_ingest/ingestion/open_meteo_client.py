"""
Open-Meteo client for hourly marine (wave/swell) and weather (wind) series.
"""
import asyncio
import logging
import math
from datetime import datetime
from typing import Optional, List, Dict, Any

import httpx

from surf_forecast_ingest.config.settings import (
    Settings,
    get_settings,
    MARINE_FIELDS,
    WEATHER_FIELDS,
)
from surf_forecast_ingest.exceptions import ProviderUnavailable, MalformedResponse
from surf_forecast_ingest.models import ProviderKind, RawSeries

logger = logging.getLogger(__name__)


class OpenMeteoClient:
    """
    Async client for the Open-Meteo marine and forecast APIs.

    One instance serves both provider kinds and can be shared across
    concurrent spot fetches. Use it as an async context manager so the
    underlying HTTP connection pool is closed.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def describe(self) -> str:
        """Provider name, stored as the `source` of every merged record."""
        return self.settings.forecast_source

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if not self._http_client:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.request_timeout_seconds),
                transport=self._transport,
            )
        return self._http_client

    def _endpoint(self, kind: ProviderKind) -> tuple:
        if kind == ProviderKind.MARINE:
            return self.settings.marine_api_url, list(MARINE_FIELDS)
        return self.settings.weather_api_url, list(WEATHER_FIELDS)

    def forecast_days(self, horizon_hours: int) -> int:
        """Days to request so that `horizon_hours` samples are covered."""
        days = math.ceil(horizon_hours / 24)
        return max(1, min(days, self.settings.max_forecast_days))

    async def fetch_series(
        self,
        kind: ProviderKind,
        latitude: float,
        longitude: float,
        horizon_hours: Optional[int] = None,
    ) -> RawSeries:
        """
        Fetch one hourly series for a coordinate.

        Args:
            kind: MARINE for wave/swell fields, WEATHER for wind fields
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            horizon_hours: Forecast horizon in hours (defaults to settings)

        Returns:
            RawSeries with a non-empty `times` axis

        Raises:
            ProviderUnavailable: network, HTTP status or timeout failure
            MalformedResponse: payload is not a valid hourly series
        """
        if horizon_hours is None:
            horizon_hours = self.settings.forecast_horizon_hours

        url, fields = self._endpoint(kind)
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "hourly": ",".join(fields),
            "timezone": "auto",
            "forecast_days": self.forecast_days(horizon_hours),
        }

        try:
            payload = await asyncio.wait_for(
                self._get_json(kind, url, params),
                timeout=self.settings.provider_total_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ProviderUnavailable(
                f"{kind.value} request timed out after "
                f"{self.settings.provider_total_timeout_seconds}s",
                kind.value,
                {"latitude": latitude, "longitude": longitude},
            ) from e

        series = self.parse_series(kind, payload, fields)

        if series.missing_fields:
            logger.warning(
                f"{kind.value} response for ({latitude}, {longitude}) is missing fields: "
                f"{', '.join(series.missing_fields)}"
            )

        return series

    async def _get_json(self, kind: ProviderKind, url: str, params: Dict[str, Any]) -> Any:
        client = await self._get_http_client()

        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            reason = _error_reason(e.response)
            logger.error(f"{kind.value} API returned HTTP {e.response.status_code}: {reason}")
            raise ProviderUnavailable(
                f"{kind.value} API returned HTTP {e.response.status_code}: {reason}",
                kind.value,
                {"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{kind.value} API request failed: {e!r}")
            raise ProviderUnavailable(
                f"{kind.value} API request failed: {e!r}", kind.value
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(
                f"{kind.value} API returned a non-JSON body", kind.value
            ) from e

    @staticmethod
    def parse_series(kind: ProviderKind, payload: Any, fields: List[str]) -> RawSeries:
        """
        Validate a decoded Open-Meteo payload and extract the hourly arrays.

        A requested field with no array in the payload is reported in
        `missing_fields`; it is not an error.
        """
        provider = kind.value

        if not isinstance(payload, dict):
            raise MalformedResponse("Response body is not a JSON object", provider)

        hourly = payload.get("hourly")
        if not isinstance(hourly, dict):
            raise MalformedResponse("Response has no 'hourly' object", provider)

        times = hourly.get("time")
        if not isinstance(times, list) or not times:
            raise MalformedResponse("Response has no hourly 'time' array", provider)
        _validate_times(times, provider)

        series_fields: Dict[str, List[Optional[float]]] = {}
        missing: List[str] = []

        for name in fields:
            values = hourly.get(name)
            if values is None:
                missing.append(name)
                continue
            if not isinstance(values, list):
                raise MalformedResponse(f"Field '{name}' is not an array", provider)
            if len(values) != len(times):
                raise MalformedResponse(
                    f"Field '{name}' has {len(values)} values for {len(times)} timestamps",
                    provider,
                    {"field": name, "values": len(values), "times": len(times)},
                )
            series_fields[name] = [_as_number(v, name, provider) for v in values]

        offset = payload.get("utc_offset_seconds", 0)
        if isinstance(offset, bool) or not isinstance(offset, (int, float)):
            raise MalformedResponse("'utc_offset_seconds' is not a number", provider)

        return RawSeries(
            provider=kind,
            times=list(times),
            fields=series_fields,
            missing_fields=missing,
            utc_offset_seconds=int(offset),
        )


def _validate_times(times: List[Any], provider: str):
    previous = None
    for t in times:
        if not isinstance(t, str):
            raise MalformedResponse(f"Timestamp {t!r} is not a string", provider)
        try:
            parsed = datetime.fromisoformat(t)
        except ValueError as e:
            raise MalformedResponse(f"Unparseable timestamp {t!r}", provider) from e
        if previous is not None:
            # Naive and offset-aware timestamps cannot be ordered against each other
            if (parsed.tzinfo is None) != (previous.tzinfo is None):
                raise MalformedResponse(
                    f"Timestamp {t!r} mixes naive and offset-aware times", provider
                )
            if parsed <= previous:
                raise MalformedResponse(
                    f"Timestamps are not strictly increasing at {t!r}", provider
                )
        previous = parsed


def _as_number(value: Any, name: str, provider: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(
            f"Field '{name}' contains non-numeric value {value!r}", provider
        )
    return float(value)


def _error_reason(response: httpx.Response) -> str:
    # Open-Meteo reports request errors as {"error": true, "reason": "..."}
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("reason"):
        return str(body["reason"])
    return response.reason_phrase
