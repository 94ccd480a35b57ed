"""
Clôture automatique des trajets passés / Auto-complete past routes.

A lancer depuis cron, une fois par nuit / Run from cron, once a night:
    DATABASE_URL=postgresql+asyncpg://fleet:password@db:5432/fleet \
    python -m scripts.auto_complete_routes

Code de sortie 1 si au moins un trajet a échoué / Exit code 1 if any route failed.
"""

import asyncio
import logging
import sys

from fleetdesk.database import async_session, engine
from fleetdesk.services.route_lifecycle import SWEEP_ACTOR, auto_complete_routes

logger = logging.getLogger("fleetdesk.cron")


async def run() -> dict:
    async with async_session() as session:
        try:
            summary = await auto_complete_routes(session, actor=SWEEP_ACTOR)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    await engine.dispose()
    return summary


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    summary = asyncio.run(run())
    logger.info("Completed %d route(s), %d failed: %s", summary["completed"], summary["failed"], summary["route_ids"])
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
