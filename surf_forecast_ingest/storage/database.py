"""
Async engine and session factory for the forecast store.
"""
import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from surf_forecast_ingest.config.settings import Settings, get_settings
from .models import Base

logger = logging.getLogger(__name__)


def create_engine(settings: Optional[Settings] = None, url: Optional[str] = None) -> AsyncEngine:
    """Create an async engine for the configured database URL."""
    settings = settings or get_settings()
    engine = create_async_engine(url or settings.database_url, echo=settings.database_echo)

    if engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys off unless asked per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine):
    """Create the spots and forecasts tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Forecast store ready ({engine.dialect.name})")
