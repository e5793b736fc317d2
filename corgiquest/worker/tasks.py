"""
corgiquest.worker.tasks — Scheduled Background Jobs
====================================================

The daily reset fires once a day at a wall-clock time (UTC) taken from
``config.yaml``.  The job itself is synchronous DB work, so it runs via
``run_db()`` to keep the event loop free.  A failed run is logged and the
loop carries on to the next day; nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from corgiquest.constants import utcnow
from corgiquest.database.engine import run_db
from corgiquest.services.daily_reset_service import reset_daily_goals

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from corgiquest.config import CorgiQuestConfig

logger = logging.getLogger(__name__)


def seconds_until_next_run(now: datetime, hour: int, minute: int) -> float:
    """Seconds from *now* to the next ``hour:minute`` (strictly in the future)."""
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailyResetScheduler:
    """Runs :func:`reset_daily_goals` every day at the configured time."""

    def __init__(self, engine: Engine, cfg: CorgiQuestConfig) -> None:
        self.engine = engine
        self.cfg = cfg

    async def run_once(self) -> dict[str, Any] | None:
        try:
            result = await run_db(reset_daily_goals, self.engine)
        except Exception:
            logger.exception("Daily reset failed", extra={"task": "daily_reset"})
            return None
        logger.info(
            "Daily reset complete: %d dogs, %d streaks updated",
            result["dogs_processed"], result["streaks_updated"],
        )
        return result

    async def run_forever(self) -> None:
        while True:
            delay = seconds_until_next_run(
                utcnow(), self.cfg.daily_reset_hour, self.cfg.daily_reset_minute
            )
            logger.info("Next daily reset in %.0f s", delay)
            await asyncio.sleep(delay)
            await self.run_once()

