"""
Sources of the spots an ingestion run should cover.
"""
import logging
from typing import List, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from surf_forecast_ingest.storage.models import SpotRow
from surf_forecast_ingest.models import Spot

logger = logging.getLogger(__name__)


class SpotDirectory:
    """Read-only view of tracked spots."""

    async def list_active_spots(self) -> List[Spot]:
        raise NotImplementedError


class DatabaseSpotDirectory(SpotDirectory):
    """Spots read from the `spots` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_active_spots(self) -> List[Spot]:
        query = (
            select(SpotRow)
            .where(SpotRow.is_active.is_(True))
            .order_by(SpotRow.name)
        )
        async with self.session_factory() as session:
            rows = (await session.execute(query)).scalars().all()

        return [
            Spot(
                id=row.id,
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                name=row.name,
                is_active=row.is_active,
            )
            for row in rows
        ]


class StaticSpotDirectory(SpotDirectory):
    """
    Spots from an in-memory table shaped like `SURF_SPOTS` in settings.
    """

    def __init__(self, spots: Dict[str, Dict[str, Any]]):
        self.spots = spots

    async def list_active_spots(self) -> List[Spot]:
        return [
            Spot(
                id=spot_id,
                latitude=meta["lat"],
                longitude=meta["lon"],
                name=meta.get("name", ""),
                is_active=meta.get("is_active", True),
            )
            for spot_id, meta in self.spots.items()
            if meta.get("is_active", True)
        ]
