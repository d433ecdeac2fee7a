"""Tests for the Open-Meteo client: request shape, parsing and error mapping."""
import asyncio

import httpx
import pytest

from surf_forecast_ingest.exceptions import MalformedResponse, ProviderUnavailable
from surf_forecast_ingest.ingestion.open_meteo_client import OpenMeteoClient
from surf_forecast_ingest.models import ProviderKind

from .conftest import (
    hourly_times,
    marine_payload,
    open_meteo_transport,
    weather_payload,
)


class TestFetchSeries:

    @pytest.mark.asyncio
    async def test_marine_request_params(self, settings):
        requests = []
        transport = open_meteo_transport(marine=marine_payload(hourly_times(24)), requests=requests)

        async with OpenMeteoClient(settings, transport=transport) as client:
            await client.fetch_series(ProviderKind.MARINE, 38.0276, 128.7195, horizon_hours=48)

        params = requests[0].url.params
        assert requests[0].url.host == "marine.test"
        assert params["latitude"] == "38.0276"
        assert params["longitude"] == "128.7195"
        assert params["hourly"] == (
            "wave_height,wave_period,wave_direction,"
            "swell_wave_height,swell_wave_period,swell_wave_direction"
        )
        assert params["timezone"] == "auto"
        assert params["forecast_days"] == "2"

    @pytest.mark.asyncio
    async def test_weather_request_params(self, settings):
        requests = []
        transport = open_meteo_transport(weather=weather_payload(hourly_times(3)), requests=requests)

        async with OpenMeteoClient(settings, transport=transport) as client:
            series = await client.fetch_series(ProviderKind.WEATHER, 33.0, 126.0, horizon_hours=25)

        assert requests[0].url.host == "weather.test"
        assert requests[0].url.params["hourly"] == "wind_speed_10m,wind_gusts_10m,wind_direction_10m"
        assert requests[0].url.params["forecast_days"] == "2"
        assert series.provider == ProviderKind.WEATHER
        assert series.values("wind_speed_10m") == [12.0, 12.0, 12.0]

    @pytest.mark.asyncio
    async def test_missing_field_differs_from_null_element(self, settings):
        payload = marine_payload(
            hourly_times(3),
            wave_height=[1.0, None, 1.4],
            omit=("swell_wave_height",),
        )
        transport = open_meteo_transport(marine=payload)

        async with OpenMeteoClient(settings, transport=transport) as client:
            series = await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)

        assert series.missing_fields == ["swell_wave_height"]
        assert not series.has_field("swell_wave_height")
        assert series.values("wave_height") == [1.0, None, 1.4]
        assert series.null_counts()["wave_height"] == 1

    @pytest.mark.asyncio
    async def test_http_error_status_is_provider_unavailable(self, settings):
        response = httpx.Response(400, json={"error": True, "reason": "Latitude must be in range"})
        transport = open_meteo_transport(marine=response)

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(ProviderUnavailable) as exc_info:
                await client.fetch_series(ProviderKind.MARINE, 99.0, 128.0)

        assert exc_info.value.provider == "marine"
        assert exc_info.value.details["status_code"] == 400
        assert "Latitude must be in range" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_server_error_is_provider_unavailable(self, settings):
        transport = open_meteo_transport(weather=httpx.Response(503, text="busy"))

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(ProviderUnavailable) as exc_info:
                await client.fetch_series(ProviderKind.WEATHER, 38.0, 128.0)

        assert exc_info.value.error_code == "PROVIDER_UNAVAILABLE"
        assert exc_info.value.provider == "weather"

    @pytest.mark.asyncio
    async def test_transport_error_is_provider_unavailable(self, settings):
        transport = open_meteo_transport(marine=httpx.ConnectError("connection refused"))

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(ProviderUnavailable):
                await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)

    @pytest.mark.asyncio
    async def test_slow_provider_times_out_as_unavailable(self, settings):
        settings.provider_total_timeout_seconds = 0.05

        async def slow_handler(request):
            await asyncio.sleep(1.0)
            return httpx.Response(200, json=marine_payload(hourly_times(2)))

        transport = httpx.MockTransport(slow_handler)

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(ProviderUnavailable) as exc_info:
                await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)

        assert exc_info.value.provider == "marine"
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_timeout_is_provider_unavailable(self, settings):
        transport = open_meteo_transport(weather=httpx.ReadTimeout("read timed out"))

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(ProviderUnavailable) as exc_info:
                await client.fetch_series(ProviderKind.WEATHER, 38.0, 128.0)

        assert exc_info.value.provider == "weather"

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self, settings):
        transport = open_meteo_transport(marine=httpx.Response(200, text="<html>oops</html>"))

        async with OpenMeteoClient(settings, transport=transport) as client:
            with pytest.raises(MalformedResponse):
                await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)

    @pytest.mark.asyncio
    async def test_client_is_reusable_after_close(self, settings):
        transport = open_meteo_transport(marine=marine_payload(hourly_times(2)))
        client = OpenMeteoClient(settings, transport=transport)

        await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)
        await client.close()
        series = await client.fetch_series(ProviderKind.MARINE, 38.0, 128.0)
        await client.close()

        assert len(series) == 2


class TestParseSeries:

    FIELDS = ["wave_height", "wave_period"]

    def parse(self, payload):
        return OpenMeteoClient.parse_series(ProviderKind.MARINE, payload, self.FIELDS)

    def test_parses_values_as_floats(self):
        series = self.parse({"hourly": {
            "time": ["2024-06-01T00:00", "2024-06-01T01:00"],
            "wave_height": [1, 2.5],
            "wave_period": [8, None],
        }})

        assert series.times == ["2024-06-01T00:00", "2024-06-01T01:00"]
        assert series.values("wave_height") == [1.0, 2.5]
        assert series.values("wave_period") == [8.0, None]
        assert series.utc_offset_seconds == 0

    def test_keeps_utc_offset(self):
        payload = marine_payload(hourly_times(1), utc_offset_seconds=32400)
        assert self.parse(payload).utc_offset_seconds == 32400

    @pytest.mark.parametrize("payload", [
        [],
        {"latitude": 1.0},
        {"hourly": []},
        {"hourly": {"wave_height": [1.0]}},
        {"hourly": {"time": []}},
    ])
    def test_missing_time_axis_is_malformed(self, payload):
        with pytest.raises(MalformedResponse):
            self.parse(payload)

    def test_length_mismatch_is_malformed(self):
        with pytest.raises(MalformedResponse) as exc_info:
            self.parse({"hourly": {
                "time": ["2024-06-01T00:00", "2024-06-01T01:00"],
                "wave_height": [1.0],
            }})

        assert exc_info.value.details == {"field": "wave_height", "values": 1, "times": 2}

    @pytest.mark.parametrize("times", [
        ["2024-06-01T01:00", "2024-06-01T00:00"],
        ["2024-06-01T00:00", "2024-06-01T00:00"],
        ["2024-06-01T00:00", "not a time"],
        ["2024-06-01T00:00", 1717200000],
    ])
    def test_bad_time_axis_is_malformed(self, times):
        with pytest.raises(MalformedResponse):
            self.parse({"hourly": {"time": times}})

    def test_mixed_naive_and_aware_times_are_malformed(self):
        with pytest.raises(MalformedResponse) as exc_info:
            OpenMeteoClient.parse_series(
                ProviderKind.WEATHER,
                {"hourly": {"time": ["2024-06-01T00:00", "2024-06-01T01:00+00:00"]}},
                [],
            )

        assert exc_info.value.provider == "weather"

    def test_offset_aware_times_are_accepted(self):
        series = self.parse({"hourly": {"time": ["2024-06-01T00:00+09:00", "2024-06-01T01:00+09:00"]}})
        assert len(series) == 2

    @pytest.mark.parametrize("bad_value", ["1.2", True, {"v": 1}])
    def test_non_numeric_value_is_malformed(self, bad_value):
        with pytest.raises(MalformedResponse):
            self.parse({"hourly": {"time": ["2024-06-01T00:00"], "wave_height": [bad_value]}})

    def test_non_array_field_is_malformed(self):
        with pytest.raises(MalformedResponse):
            self.parse({"hourly": {"time": ["2024-06-01T00:00"], "wave_height": 1.0}})

    def test_all_fields_missing_is_not_an_error(self):
        series = self.parse({"hourly": {"time": ["2024-06-01T00:00"]}})

        assert series.missing_fields == ["wave_height", "wave_period"]
        assert series.fields == {}


class TestForecastDays:

    @pytest.mark.parametrize("hours,days", [(1, 1), (24, 1), (25, 2), (48, 2), (500, 7), (0, 1)])
    def test_days_cover_horizon_within_limits(self, settings, hours, days):
        assert OpenMeteoClient(settings).forecast_days(hours) == days
