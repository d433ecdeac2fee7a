"""
SQLAlchemy ORM models for the spots and forecasts tables.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class SpotRow(Base):
    """Surf spot directory entry. Only read by the ingestion pipeline."""

    __tablename__ = "spots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ForecastRow(Base):
    """Merged hourly forecast for one spot.

    At most one row exists per (spot_id, forecast_time); re-ingesting an hour
    overwrites the value columns, fetched_at and source in place.
    """

    __tablename__ = "forecasts"
    __table_args__ = (
        UniqueConstraint("spot_id", "forecast_time", name="uq_forecast_spot_time"),
        Index("ix_forecast_spot_time", "spot_id", "forecast_time"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    spot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("spots.id", ondelete="CASCADE"), nullable=False
    )
    forecast_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Waves (marine)
    wave_height: Mapped[float] = mapped_column(Float, nullable=False)
    wave_period: Mapped[float] = mapped_column(Float, nullable=False)
    wave_direction: Mapped[float] = mapped_column(Float, nullable=False)

    # Swell (marine)
    swell_height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    swell_period: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    swell_direction: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Wind (weather)
    wind_speed: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wind_gusts: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wind_direction: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    source: Mapped[str] = mapped_column(String(30), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# Columns replaced when an existing (spot_id, forecast_time) row is re-ingested
UPSERT_UPDATE_COLUMNS = (
    "wave_height",
    "wave_period",
    "wave_direction",
    "swell_height",
    "swell_period",
    "swell_direction",
    "wind_speed",
    "wind_gusts",
    "wind_direction",
    "fetched_at",
    "source",
)
