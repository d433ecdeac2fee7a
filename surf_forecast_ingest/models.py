"""
Domain types shared by the provider client, merger, writer and orchestrator.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any


class ProviderKind(str, Enum):
    """Which upstream series a request targets."""
    MARINE = "marine"
    WEATHER = "weather"


@dataclass(frozen=True)
class Spot:
    """A tracked surf spot as seen by the pipeline."""
    id: str
    latitude: float
    longitude: float
    name: str = ""
    is_active: bool = True

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})" if self.name else self.id


@dataclass
class RawSeries:
    """
    One provider response reduced to its hourly arrays.

    `fields` only holds arrays the provider actually returned; requested
    fields it left out are listed in `missing_fields`. A `None` element
    inside an array means the provider returned null for that hour.
    """
    provider: ProviderKind
    times: List[str]
    fields: Dict[str, List[Optional[float]]] = field(default_factory=dict)
    missing_fields: List[str] = field(default_factory=list)
    utc_offset_seconds: int = 0

    def __len__(self) -> int:
        return len(self.times)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def values(self, name: str) -> Optional[List[Optional[float]]]:
        """Return the array for `name`, or None if the provider omitted it."""
        return self.fields.get(name)

    def null_counts(self) -> Dict[str, int]:
        """Count null elements per returned field."""
        return {
            name: sum(1 for v in values if v is None)
            for name, values in self.fields.items()
        }


@dataclass
class MergedForecastRecord:
    """One merged forecast hour for one spot, keyed by (spot_id, forecast_time)."""
    spot_id: str
    forecast_time: datetime
    wave_height: float
    wave_period: float
    wave_direction: float
    fetched_at: datetime
    source: str
    swell_height: Optional[float] = None
    swell_period: Optional[float] = None
    swell_direction: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gusts: Optional[float] = None
    wind_direction: Optional[float] = None

    @property
    def key(self) -> tuple:
        return (self.spot_id, self.forecast_time)

    @property
    def has_wind(self) -> bool:
        return any(
            v is not None for v in (self.wind_speed, self.wind_gusts, self.wind_direction)
        )

    def as_row(self) -> Dict[str, Any]:
        """Column mapping for the forecasts table (value columns and key only)."""
        return {
            "spot_id": self.spot_id,
            "forecast_time": self.forecast_time,
            "wave_height": self.wave_height,
            "wave_period": self.wave_period,
            "wave_direction": self.wave_direction,
            "swell_height": self.swell_height,
            "swell_period": self.swell_period,
            "swell_direction": self.swell_direction,
            "wind_speed": self.wind_speed,
            "wind_gusts": self.wind_gusts,
            "wind_direction": self.wind_direction,
            "fetched_at": self.fetched_at,
            "source": self.source,
        }


class SpotStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SpotResult:
    """Outcome of one spot's fetch, merge and upsert within a run."""
    spot_id: str
    status: SpotStatus
    spot_name: str = ""
    records_written: int = 0
    weather_degraded: bool = False
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spot_id": self.spot_id,
            "spot_name": self.spot_name,
            "status": self.status.value,
            "records_written": self.records_written,
            "weather_degraded": self.weather_degraded,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class RunSummary:
    """Result of one pass of the orchestrator over all active spots."""
    started_at: datetime
    fetched_at: datetime
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    finished_at: Optional[datetime] = None
    results: List[SpotResult] = field(default_factory=list)
    cancelled: bool = False

    def _count(self, status: SpotStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def spots_attempted(self) -> int:
        return len(self.results) - self.spots_skipped

    @property
    def spots_succeeded(self) -> int:
        return self._count(SpotStatus.SUCCEEDED)

    @property
    def spots_failed(self) -> int:
        return self._count(SpotStatus.FAILED)

    @property
    def spots_skipped(self) -> int:
        return self._count(SpotStatus.SKIPPED)

    @property
    def records_written(self) -> int:
        return sum(r.records_written for r in self.results)

    @property
    def failures(self) -> Dict[str, str]:
        return {
            r.spot_id: r.error or "unknown error"
            for r in self.results
            if r.status == SpotStatus.FAILED
        }

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "fetched_at": self.fetched_at.isoformat(),
            "cancelled": self.cancelled,
            "spots_attempted": self.spots_attempted,
            "spots_succeeded": self.spots_succeeded,
            "spots_failed": self.spots_failed,
            "spots_skipped": self.spots_skipped,
            "records_written": self.records_written,
            "duration_seconds": round(self.duration_seconds, 3),
            "results": [r.to_dict() for r in self.results],
        }
