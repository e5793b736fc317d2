"""
corgiquest.services.daily_reset_service — Midnight Goal Rollover
=================================================================

Runs once a day (see :mod:`corgiquest.worker`).  For every dog it makes
sure today's DailyGoal exists and judges yesterday's goal against the
Streak:

- yesterday met both goals  → streak +1, longest updated
- yesterday missed a goal   → streak reset to 0
- no row for yesterday      → streak untouched

``Streak.last_evaluated_date`` records which day was last judged, so a
second run on the same day leaves the streak alone.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from corgiquest.constants import MENTAL_GOAL, PHYSICAL_GOAL, today_utc, yesterday_of
from corgiquest.database.engine import get_session
from corgiquest.database.models import DailyGoal, Dog, Streak

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def evaluate_streak(streak: Streak, yesterday_goal: DailyGoal | None, yesterday: date) -> bool:
    """Apply yesterday's outcome to *streak* in place.  True if it changed."""
    if yesterday_goal is None:
        return False
    if streak.last_evaluated_date == yesterday:
        return False

    if yesterday_goal.goals_met:
        streak.current_streak += 1
        streak.longest_streak = max(streak.longest_streak, streak.current_streak)
    else:
        streak.current_streak = 0
    streak.last_activity_date = yesterday
    streak.last_evaluated_date = yesterday
    return True


def reset_daily_goals(engine: Engine, today: date | None = None) -> dict[str, Any]:
    """Create today's goals and roll every streak forward by one day."""
    today = today or today_utc()
    yesterday = yesterday_of(today)
    dogs_processed = 0
    streaks_updated = 0

    with get_session(engine) as session:
        dog_ids = session.scalars(select(Dog.id).order_by(Dog.id)).all()
        goals = {
            (g.dog_id, g.day): g
            for g in session.scalars(
                select(DailyGoal).where(DailyGoal.day.in_([today, yesterday]))
            )
        }
        streaks = {s.dog_id: s for s in session.scalars(select(Streak))}

        for dog_id in dog_ids:
            if (dog_id, today) not in goals:
                session.add(DailyGoal(
                    dog_id=dog_id,
                    day=today,
                    physical_points=0,
                    physical_goal=PHYSICAL_GOAL,
                    mental_points=0,
                    mental_goal=MENTAL_GOAL,
                ))

            streak = streaks.get(dog_id)
            if streak is not None and evaluate_streak(
                streak, goals.get((dog_id, yesterday)), yesterday
            ):
                streaks_updated += 1
            dogs_processed += 1

    logger.info(
        "Daily reset for %s: %d dogs processed, %d streaks updated.",
        today, dogs_processed, streaks_updated,
    )
    return {
        "success": True,
        "dogs_processed": dogs_processed,
        "streaks_updated": streaks_updated,
        "date": today.isoformat(),
        "yesterday_date": yesterday.isoformat(),
    }
