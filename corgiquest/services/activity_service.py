"""
corgiquest.services.activity_service — Activity & Mood Logging
===============================================================

``log_activity`` is the heart of the app.  In a single session it:

1. inserts the Activity row,
2. inserts one ActivityStatGain per gain,
3. levels up each matching DogStat,
4. levels up the Dog's aggregate and records newly unlocked cosmetics,
5. upserts today's DailyGoal totals,
6. upserts the Streak's ``last_activity_date``,
7. drops today's cached recommendations.

The session commits once at the end, so a failure at any step leaves no
partial writes behind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from corgiquest.constants import MENTAL_GOAL, OVERALL, PHYSICAL_GOAL, utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import (
    Activity,
    ActivityStatGain,
    CosmeticItem,
    DailyGoal,
    Dog,
    DogStat,
    Mood,
    MoodLog,
    NewlyUnlockedItem,
    StatType,
    Streak,
)
from corgiquest.engine.progression import calculate_level_up
from corgiquest.errors import NotFoundError
from corgiquest.services.recommendation_service import delete_cached_recommendation

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass
class LevelUpEvent:
    stat_type: str
    old_level: int
    new_level: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "stat_type": self.stat_type,
            "old_level": self.old_level,
            "new_level": self.new_level,
        }


@dataclass
class ActivityLogResult:
    """What ``log_activity`` hands back to the caller."""

    success: bool
    activity_id: int
    level_ups: list[LevelUpEvent] = field(default_factory=list)
    total_xp_gained: int = 0
    newly_unlocked_items: list[dict[str, Any]] = field(default_factory=list)
    cache_invalidated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "activity_id": self.activity_id,
            "level_ups": [lu.to_dict() for lu in self.level_ups],
            "total_xp_gained": self.total_xp_gained,
            "newly_unlocked_items": self.newly_unlocked_items,
            "cache_invalidated": self.cache_invalidated,
        }


def _gain_fields(gain: Any) -> tuple[str, int]:
    """Accept ``StatGain`` dataclasses, pydantic models or plain dicts.

    Raises :class:`ValueError` for a category outside :class:`StatType`.
    """
    if isinstance(gain, Mapping):
        stat_type, xp_amount = gain["stat_type"], gain["xp_amount"]
    else:
        stat_type, xp_amount = gain.stat_type, gain.xp_amount
    return StatType(stat_type).value, int(xp_amount)


# ---------------------------------------------------------------------------
# In-session steps
# ---------------------------------------------------------------------------
def apply_stat_gain(
    session: Session, dog_id: int, stat_type: str, xp_amount: int
) -> LevelUpEvent | None:
    """Level up one DogStat.  A missing row is skipped with a warning."""
    stat = session.scalar(
        select(DogStat).where(DogStat.dog_id == dog_id, DogStat.stat_type == stat_type)
    )
    if stat is None:
        logger.warning("No %s stat row for dog %d; skipping %d XP.", stat_type, dog_id, xp_amount)
        return None

    result = calculate_level_up(stat.level, stat.xp, xp_amount)
    old_level = stat.level
    stat.level = result.new_level
    stat.xp = result.new_xp
    stat.xp_to_next_level = result.xp_to_next_level

    if result.leveled_up:
        return LevelUpEvent(stat_type=stat_type, old_level=old_level, new_level=result.new_level)
    return None


def unlock_items_between(
    session: Session, dog_id: int, old_level: int, new_level: int
) -> list[dict[str, Any]]:
    """Flag every cosmetic with ``old_level < unlock_level <= new_level`` as new."""
    items = session.scalars(
        select(CosmeticItem)
        .where(
            CosmeticItem.unlock_level > old_level,
            CosmeticItem.unlock_level <= new_level,
        )
        .order_by(CosmeticItem.unlock_level)
    ).all()

    unlocked: list[dict[str, Any]] = []
    for item in items:
        session.add(NewlyUnlockedItem(dog_id=dog_id, item_id=item.id))
        unlocked.append({
            "id": item.id,
            "name": item.name,
            "unlock_level": item.unlock_level,
            "item_type": item.item_type,
            "icon": item.icon,
        })
    if unlocked:
        logger.info("Dog %d unlocked %d cosmetic item(s).", dog_id, len(unlocked))
    return unlocked


def upsert_daily_goal(
    session: Session, dog_id: int, day: date, physical_points: int, mental_points: int
) -> DailyGoal:
    goal = session.scalar(
        select(DailyGoal).where(DailyGoal.dog_id == dog_id, DailyGoal.day == day)
    )
    if goal is None:
        goal = DailyGoal(
            dog_id=dog_id,
            day=day,
            physical_points=physical_points,
            physical_goal=PHYSICAL_GOAL,
            mental_points=mental_points,
            mental_goal=MENTAL_GOAL,
        )
        session.add(goal)
    else:
        goal.physical_points += physical_points
        goal.mental_points += mental_points
    return goal


def touch_streak(session: Session, dog_id: int, day: date) -> Streak:
    streak = session.scalar(select(Streak).where(Streak.dog_id == dog_id))
    if streak is None:
        streak = Streak(
            dog_id=dog_id, current_streak=0, longest_streak=0, last_activity_date=day
        )
        session.add(streak)
    else:
        streak.last_activity_date = day
    return streak


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def log_activity(
    engine: Engine,
    *,
    dog_id: int,
    user_id: int,
    activity_name: str,
    stat_gains: Iterable[Any],
    physical_points: int,
    mental_points: int,
    description: str | None = None,
    duration_minutes: int | None = None,
    now: datetime | None = None,
) -> ActivityLogResult:
    """Record an activity and apply its XP and points.

    Any exception rolls the whole thing back and propagates; nothing is
    retried.

    Raises
    ------
    ValueError
        If a gain names an unknown stat category.  Nothing is written.
    NotFoundError
        If the dog does not exist.  Nothing is written.
    """
    now = now or utcnow()
    today = now.date()
    gains = [_gain_fields(g) for g in stat_gains]

    with get_session(engine) as session:
        dog = session.get(Dog, dog_id)
        if dog is None:
            raise NotFoundError(f"Dog {dog_id} not found")

        activity = Activity(
            dog_id=dog_id,
            user_id=user_id,
            activity_name=activity_name,
            description=description,
            duration_minutes=duration_minutes,
            physical_points=physical_points,
            mental_points=mental_points,
            created_at=now,
        )
        session.add(activity)
        session.flush()

        for stat_type, xp_amount in gains:
            session.add(ActivityStatGain(
                activity_id=activity.id, stat_type=stat_type, xp_amount=xp_amount
            ))

        level_ups: list[LevelUpEvent] = []
        for stat_type, xp_amount in gains:
            event = apply_stat_gain(session, dog_id, stat_type, xp_amount)
            if event is not None:
                level_ups.append(event)

        total_xp = sum(xp for _, xp in gains)
        newly_unlocked: list[dict[str, Any]] = []
        result = calculate_level_up(dog.overall_level, dog.overall_xp, total_xp)
        old_level = dog.overall_level
        dog.overall_level = result.new_level
        dog.overall_xp = result.new_xp
        dog.xp_to_next_level = result.xp_to_next_level
        if result.leveled_up:
            level_ups.append(LevelUpEvent(
                stat_type=OVERALL, old_level=old_level, new_level=result.new_level
            ))
            newly_unlocked = unlock_items_between(
                session, dog_id, old_level, result.new_level
            )

        upsert_daily_goal(session, dog_id, today, physical_points, mental_points)
        touch_streak(session, dog_id, today)
        cache_invalidated = delete_cached_recommendation(session, dog_id, today)

        session.flush()
        activity_id = activity.id

    logger.info(
        "Logged %r for dog %d by user %d: +%d XP, %d level-up(s).",
        activity_name, dog_id, user_id, total_xp, len(level_ups),
    )
    return ActivityLogResult(
        success=True,
        activity_id=activity_id,
        level_ups=level_ups,
        total_xp_gained=total_xp,
        newly_unlocked_items=newly_unlocked,
        cache_invalidated=cache_invalidated,
    )


def log_mood(
    engine: Engine,
    *,
    dog_id: int,
    user_id: int,
    mood: str,
    note: str | None = None,
    activity_id: int | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Insert a MoodLog and drop today's cached recommendations.

    Raises
    ------
    ValueError
        If *mood* is not one of :class:`Mood`.
    """
    mood_value = Mood(mood).value
    now = now or utcnow()

    with get_session(engine) as session:
        entry = MoodLog(
            dog_id=dog_id,
            user_id=user_id,
            mood=mood_value,
            note=note,
            activity_id=activity_id,
            created_at=now,
        )
        session.add(entry)
        session.flush()
        cache_invalidated = delete_cached_recommendation(session, dog_id, now.date())
        mood_log_id = entry.id

    logger.info("Logged mood %r for dog %d.", mood_value, dog_id)
    return {
        "success": True,
        "mood_log_id": mood_log_id,
        "cache_invalidated": cache_invalidated,
    }
