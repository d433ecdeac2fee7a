"""
Idempotent writes into the forecast store.
"""
import asyncio
import logging
from typing import Optional, List, Dict, Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from surf_forecast_ingest.config.settings import Settings, get_settings
from surf_forecast_ingest.exceptions import StoreWriteFailure
from surf_forecast_ingest.models import MergedForecastRecord
from .models import ForecastRow, SpotRow, UPSERT_UPDATE_COLUMNS, new_id

logger = logging.getLogger(__name__)


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise ValueError(f"Upsert is not supported for dialect '{dialect_name}'")


def _chunks(items: List[Any], size: int) -> Iterable[List[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _is_transient(error: DBAPIError) -> bool:
    if isinstance(error, IntegrityError):
        return False
    return isinstance(error, OperationalError) or error.connection_invalidated


class ForecastUpsertWriter:
    """
    Writes merged forecast batches keyed by (spot_id, forecast_time).

    Rows go through INSERT ... ON CONFLICT DO UPDATE against the
    uq_forecast_spot_time constraint, so concurrent or repeated writes of
    the same key can never create a second row. A batch is written in one
    transaction: it is either applied completely or not at all.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Optional[Settings] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    async def upsert(self, records: List[MergedForecastRecord]) -> int:
        """
        Insert new forecast hours and overwrite existing ones.

        Returns:
            Number of distinct rows written

        Raises:
            StoreWriteFailure: on a constraint violation or when transient
                errors persist past the retry budget
        """
        if not records:
            return 0

        # One statement may not touch the same row twice; the last record wins
        latest: Dict[tuple, MergedForecastRecord] = {}
        for record in records:
            latest[record.key] = record
        rows = [record.as_row() for record in latest.values()]

        spot_label = ",".join(sorted({r["spot_id"] for r in rows}))
        attempts = max(1, self.settings.store_write_retries)

        for attempt in range(1, attempts + 1):
            try:
                await self._write(rows)
                return len(rows)
            except DBAPIError as e:
                if not _is_transient(e):
                    logger.error(f"Forecast upsert rejected for spot {spot_label}: {e.orig}")
                    raise StoreWriteFailure(spot_label, attempt, e) from e
                if attempt == attempts:
                    logger.error(
                        f"Forecast upsert failed for spot {spot_label} "
                        f"after {attempts} attempts: {e.orig}"
                    )
                    raise StoreWriteFailure(spot_label, attempt, e) from e
                delay = self.settings.store_retry_delay_seconds * attempt
                logger.warning(
                    f"Forecast upsert attempt {attempt}/{attempts} failed for spot "
                    f"{spot_label}, retrying in {delay:.1f}s: {e.orig}"
                )
                await asyncio.sleep(delay)

    async def _write(self, rows: List[Dict[str, Any]]):
        async with self.session_factory() as session:
            async with session.begin():
                insert = _dialect_insert(session.bind.dialect.name)
                for chunk in _chunks(rows, self.settings.upsert_chunk_size):
                    values = [{**row, "id": new_id()} for row in chunk]
                    stmt = insert(ForecastRow).values(values)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[ForecastRow.spot_id, ForecastRow.forecast_time],
                        set_={col: stmt.excluded[col] for col in UPSERT_UPDATE_COLUMNS},
                    )
                    await session.execute(stmt)


async def seed_spots(
    session_factory: async_sessionmaker[AsyncSession],
    spots: Dict[str, Dict[str, Any]],
) -> int:
    """
    Insert or refresh spot metadata keyed by spot id.

    Args:
        session_factory: Session factory bound to the forecast store
        spots: Mapping of spot id to {"name", "lat", "lon", "is_active"}

    Returns:
        Number of spots written
    """
    if not spots:
        return 0

    rows = [
        {
            "id": spot_id,
            "name": meta["name"],
            "latitude": meta["lat"],
            "longitude": meta["lon"],
            "is_active": meta.get("is_active", True),
        }
        for spot_id, meta in spots.items()
    ]

    async with session_factory() as session:
        async with session.begin():
            insert = _dialect_insert(session.bind.dialect.name)
            stmt = insert(SpotRow).values(rows)
            stmt = stmt.on_conflict_do_update(
                index_elements=[SpotRow.id],
                set_={
                    col: stmt.excluded[col]
                    for col in ("name", "latitude", "longitude", "is_active")
                },
            )
            await session.execute(stmt)

    logger.info(f"Seeded {len(rows)} spots")
    return len(rows)


async def count_forecasts(
    session_factory: async_sessionmaker[AsyncSession],
    spot_id: Optional[str] = None,
) -> int:
    """Number of stored forecast rows, optionally for one spot."""
    query = select(func.count()).select_from(ForecastRow)
    if spot_id is not None:
        query = query.where(ForecastRow.spot_id == spot_id)

    async with session_factory() as session:
        return (await session.execute(query)).scalar_one()
