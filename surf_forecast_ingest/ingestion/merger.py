"""
Merge marine and weather hourly series onto the marine time axis.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any

import pandas as pd

from surf_forecast_ingest.config.settings import (
    MARINE_FIELDS,
    REQUIRED_MARINE_FIELDS,
    WEATHER_FIELDS,
)
from surf_forecast_ingest.models import RawSeries, MergedForecastRecord

logger = logging.getLogger(__name__)

WAVE_COLUMNS = [MARINE_FIELDS[f] for f in REQUIRED_MARINE_FIELDS]
WIND_COLUMNS = list(WEATHER_FIELDS.values())


class SeriesMerger:
    """
    Align a marine series and an optional weather series into merged records.

    The marine series defines which hours exist. Wind values attach only
    where the weather series carries the exact same timestamp string;
    weather-only hours are dropped.
    """

    def __init__(self, source: str = "open-meteo"):
        self.source = source

    def merge(
        self,
        spot_id: str,
        marine: RawSeries,
        weather: Optional[RawSeries],
        horizon_hours: int,
        fetched_at: datetime,
        source: Optional[str] = None,
    ) -> List[MergedForecastRecord]:
        """
        Build one record per marine timestamp, capped to `horizon_hours`.

        Args:
            spot_id: Spot the series belong to
            marine: Primary series (wave/swell)
            weather: Secondary series (wind), or None if its fetch failed
            horizon_hours: Maximum number of hours to keep, from the first sample
            fetched_at: Timestamp of the ingestion run
            source: Provenance tag (defaults to the merger's source)

        Returns:
            Records in marine order
        """
        count = min(horizon_hours, len(marine.times))
        if count <= 0:
            return []

        marine_df = self._frame(marine, MARINE_FIELDS).iloc[:count]
        wind_df = self._frame(weather, WEATHER_FIELDS)
        # Last sample wins if the weather axis repeats a timestamp
        wind_df = wind_df[~wind_df.index.duplicated(keep="last")]

        merged = marine_df.join(wind_df, how="left")
        merged[WAVE_COLUMNS] = merged[WAVE_COLUMNS].fillna(0.0)

        source = source or self.source
        records = []
        for time_str, row in zip(merged.index, merged.to_dict("records")):
            records.append(MergedForecastRecord(
                spot_id=spot_id,
                forecast_time=to_utc(time_str, marine.utc_offset_seconds),
                wave_height=float(row["wave_height"]),
                wave_period=float(row["wave_period"]),
                wave_direction=float(row["wave_direction"]),
                swell_height=_optional(row["swell_height"]),
                swell_period=_optional(row["swell_period"]),
                swell_direction=_optional(row["swell_direction"]),
                wind_speed=_optional(row["wind_speed"]),
                wind_gusts=_optional(row["wind_gusts"]),
                wind_direction=_optional(row["wind_direction"]),
                fetched_at=fetched_at,
                source=source,
            ))

        return records

    @staticmethod
    def _frame(series: Optional[RawSeries], field_map: Dict[str, str]) -> pd.DataFrame:
        """Frame indexed by timestamp string, one float column per mapped field."""
        times = series.times if series is not None else []
        index = pd.Index(times, dtype=object, name="time")

        columns = {}
        for provider_field, column in field_map.items():
            values = series.values(provider_field) if series is not None else None
            if values is None:
                values = [None] * len(times)
            columns[column] = pd.Series(values, index=index, dtype="float64")

        return pd.DataFrame(columns, index=index)

    @staticmethod
    def alignment_report(marine: RawSeries, weather: Optional[RawSeries]) -> Dict[str, Any]:
        """
        Summarize how the two time axes line up and what each provider left out.
        """
        marine_times = pd.Index(marine.times)
        weather_times = pd.Index(weather.times if weather is not None else [])

        return {
            "marine_hours": len(marine_times),
            "weather_hours": len(weather_times),
            "common_hours": len(marine_times.intersection(weather_times)),
            "marine_only_hours": len(marine_times.difference(weather_times)),
            "weather_only_hours": len(weather_times.difference(marine_times)),
            "missing_marine_fields": list(marine.missing_fields),
            "missing_weather_fields": (
                list(weather.missing_fields) if weather is not None else list(WEATHER_FIELDS)
            ),
            "marine_null_counts": marine.null_counts(),
            "weather_null_counts": weather.null_counts() if weather is not None else {},
        }


def to_utc(time_str: str, utc_offset_seconds: int = 0) -> datetime:
    """Convert a provider-local timestamp string to an aware UTC datetime."""
    parsed = datetime.fromisoformat(time_str)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone(timedelta(seconds=utc_offset_seconds)))
    return parsed.astimezone(timezone.utc)


def _optional(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)
