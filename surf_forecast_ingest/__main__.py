"""
Command line entry point.

    python -m surf_forecast_ingest run [--seed] [--hours N]
    python -m surf_forecast_ingest seed
    python -m surf_forecast_ingest serve
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from surf_forecast_ingest.config.settings import SURF_SPOTS, configure_logging, get_settings
from surf_forecast_ingest.ingestion.manager import IngestionManager
from surf_forecast_ingest.storage import seed_spots

logger = logging.getLogger(__name__)


async def _seed(manager: IngestionManager) -> int:
    count = await seed_spots(manager.session_factory, SURF_SPOTS)
    logger.info(f"Seeded {count} surf spots")
    return count


async def run_once(seed: bool = False, hours: Optional[int] = None) -> int:
    """Run a single ingestion pass and print its summary as JSON."""
    manager = IngestionManager()
    if hours:
        manager.pipeline.horizon_hours = hours

    await manager.startup(start_scheduler=False)
    try:
        if seed:
            await _seed(manager)
        summary = await manager.scheduler.run_now()
    finally:
        await manager.shutdown()

    print(json.dumps(summary.to_dict(), indent=2))
    return 1 if summary.spots_failed else 0


async def seed_only() -> int:
    manager = IngestionManager()
    await manager.startup(start_scheduler=False)
    try:
        await _seed(manager)
    finally:
        await manager.shutdown()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="surf_forecast_ingest",
        description="Surf forecast ingestion service",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run_parser = sub.add_parser("run", help="Run one ingestion pass and exit")
    run_parser.add_argument("--seed", action="store_true", help="Seed the built-in spots first")
    run_parser.add_argument("--hours", type=int, default=None, help="Forecast horizon in hours")

    sub.add_parser("seed", help="Insert or update the built-in surf spots")
    sub.add_parser("serve", help="Serve the API with the scheduler running")

    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    args = parser.parse_args(argv)

    if args.command == "serve":
        from surf_forecast_ingest.api.main import run_server
        run_server()
        return 0

    configure_logging(args.log_level)
    logger.info(f"{get_settings().app_name}: {args.command}")

    if args.command == "run":
        return asyncio.run(run_once(seed=args.seed, hours=args.hours))
    return asyncio.run(seed_only())


if __name__ == "__main__":
    sys.exit(main())
