"""
corgiquest.services.dog_service — Read-Side Dog Queries
========================================================

Everything the dashboard reads about a dog: profile and stats, today's
goals, the streak, activity and mood feeds, per-stat history and the
weekly summary.  All functions are read-only and return plain dicts ready
for JSON.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from corgiquest.constants import FEED_LIMIT, XP_PER_LEVEL, as_utc, day_bounds, today_utc, utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import (
    Activity,
    ActivityStatGain,
    DailyGoal,
    Dog,
    DogStat,
    MoodLog,
    StatType,
    Streak,
    User,
)
from corgiquest.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

STAT_DETAIL_RECENT = 20
STAT_HISTORY_DAYS = 30
TOP_ACTIVITIES = 10

# Ordering used for the weekly mood trend, worst to best
MOOD_SCORES: dict[str, int] = {
    "reactive": 0,
    "anxious": 1,
    "tired": 2,
    "neutral": 3,
    "playful": 4,
    "calm": 5,
}
MOOD_TREND_THRESHOLD = 0.5


# ---------------------------------------------------------------------------
# Serialisers
# ---------------------------------------------------------------------------
def _iso(value: datetime | None) -> str | None:
    value = as_utc(value)
    return value.isoformat() if value else None


def dog_to_dict(dog: Dog) -> dict[str, Any]:
    return {
        "id": dog.id,
        "name": dog.name,
        "household_id": dog.household_id,
        "overall_level": dog.overall_level,
        "overall_xp": dog.overall_xp,
        "xp_to_next_level": dog.xp_to_next_level,
        "photo_url": dog.photo_url,
    }


def stat_to_dict(stat: DogStat) -> dict[str, Any]:
    return {
        "id": stat.id,
        "stat_type": stat.stat_type,
        "level": stat.level,
        "xp": stat.xp,
        "xp_to_next_level": stat.xp_to_next_level,
    }


def goal_to_dict(goal: DailyGoal) -> dict[str, Any]:
    return {
        "dog_id": goal.dog_id,
        "date": goal.day.isoformat(),
        "physical_points": goal.physical_points,
        "physical_goal": goal.physical_goal,
        "mental_points": goal.mental_points,
        "mental_goal": goal.mental_goal,
        "goals_met": goal.goals_met,
    }


def streak_to_dict(streak: Streak) -> dict[str, Any]:
    return {
        "dog_id": streak.dog_id,
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "last_activity_date": streak.last_activity_date.isoformat(),
    }


def activity_to_dict(activity: Activity, user_name: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": activity.id,
        "dog_id": activity.dog_id,
        "user_id": activity.user_id,
        "activity_name": activity.activity_name,
        "description": activity.description,
        "duration_minutes": activity.duration_minutes,
        "physical_points": activity.physical_points,
        "mental_points": activity.mental_points,
        "created_at": _iso(activity.created_at),
    }
    if user_name is not None:
        body["user_name"] = user_name
    return body


def mood_to_dict(mood: MoodLog, user_name: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "id": mood.id,
        "dog_id": mood.dog_id,
        "user_id": mood.user_id,
        "mood": mood.mood,
        "note": mood.note,
        "activity_id": mood.activity_id,
        "created_at": _iso(mood.created_at),
    }
    if user_name is not None:
        body["user_name"] = user_name
    return body


def _user_names(session: Session, user_ids: set[int]) -> dict[int, str]:
    if not user_ids:
        return {}
    rows = session.execute(select(User.id, User.name).where(User.id.in_(user_ids))).all()
    return {row.id: row.name for row in rows}


def week_start_of(day: date) -> date:
    """Sunday on or before *day*."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


# ---------------------------------------------------------------------------
# Profile, goals, streak
# ---------------------------------------------------------------------------
def get_dog_profile(
    engine: Engine, dog_id: int, mood_days: int | None = None, now: datetime | None = None
) -> dict[str, Any]:
    """Dog, its stat rows, and optionally the last *mood_days* of moods.

    Raises
    ------
    NotFoundError
        If the dog does not exist.
    """
    with get_session(engine) as session:
        dog = session.get(Dog, dog_id)
        if dog is None:
            raise NotFoundError(f"Dog {dog_id} not found")
        stats = session.scalars(
            select(DogStat).where(DogStat.dog_id == dog_id).order_by(DogStat.stat_type)
        ).all()
        profile: dict[str, Any] = {
            "dog": dog_to_dict(dog),
            "stats": [stat_to_dict(s) for s in stats],
        }

    if mood_days is not None:
        profile["mood_history"] = get_mood_history(engine, dog_id, days=mood_days, now=now)
    return profile


def get_daily_goals(engine: Engine, dog_id: int, today: date | None = None) -> dict[str, Any] | None:
    day = today or today_utc()
    with get_session(engine) as session:
        goal = session.scalar(
            select(DailyGoal).where(DailyGoal.dog_id == dog_id, DailyGoal.day == day)
        )
        return goal_to_dict(goal) if goal else None


def get_streak(engine: Engine, dog_id: int) -> dict[str, Any] | None:
    with get_session(engine) as session:
        streak = session.scalar(select(Streak).where(Streak.dog_id == dog_id))
        return streak_to_dict(streak) if streak else None


# ---------------------------------------------------------------------------
# Activity feeds
# ---------------------------------------------------------------------------
def get_activity_feed(engine: Engine, dog_id: int, limit: int = FEED_LIMIT) -> list[dict[str, Any]]:
    """Most recent activities with the logging user's name and stat gains."""
    with get_session(engine) as session:
        activities = session.scalars(
            select(Activity)
            .where(Activity.dog_id == dog_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        ).all()
        names = _user_names(session, {a.user_id for a in activities})

        feed = []
        for activity in activities:
            body = activity_to_dict(activity, names.get(activity.user_id, "Unknown"))
            body["stat_gains"] = [
                {"stat_type": g.stat_type, "xp_amount": g.xp_amount}
                for g in activity.stat_gains
            ]
            feed.append(body)
        return feed


def get_todays_activities(
    engine: Engine, dog_id: int, today: date | None = None
) -> list[dict[str, Any]]:
    start, end = day_bounds(today or today_utc())
    with get_session(engine) as session:
        activities = session.scalars(
            select(Activity)
            .where(
                Activity.dog_id == dog_id,
                Activity.created_at >= start,
                Activity.created_at < end,
            )
            .order_by(Activity.created_at)
        ).all()
        names = _user_names(session, {a.user_id for a in activities})
        return [activity_to_dict(a, names.get(a.user_id, "Unknown")) for a in activities]


# ---------------------------------------------------------------------------
# Mood feeds
# ---------------------------------------------------------------------------
def get_mood_feed(engine: Engine, dog_id: int, limit: int = FEED_LIMIT) -> list[dict[str, Any]]:
    with get_session(engine) as session:
        moods = session.scalars(
            select(MoodLog)
            .where(MoodLog.dog_id == dog_id)
            .order_by(MoodLog.created_at.desc(), MoodLog.id.desc())
            .limit(limit)
        ).all()
        names = _user_names(session, {m.user_id for m in moods})
        return [mood_to_dict(m, names.get(m.user_id, "Unknown")) for m in moods]


def get_latest_mood(engine: Engine, dog_id: int) -> dict[str, Any] | None:
    feed = get_mood_feed(engine, dog_id, limit=1)
    return feed[0] if feed else None


def get_todays_moods(engine: Engine, dog_id: int, today: date | None = None) -> dict[str, Any]:
    start, end = day_bounds(today or today_utc())
    with get_session(engine) as session:
        moods = session.scalars(
            select(MoodLog)
            .where(
                MoodLog.dog_id == dog_id,
                MoodLog.created_at >= start,
                MoodLog.created_at < end,
            )
            .order_by(MoodLog.created_at)
        ).all()
        return {
            "has_mood_today": bool(moods),
            "count": len(moods),
            "moods": [mood_to_dict(m) for m in moods],
        }


def get_mood_history(
    engine: Engine, dog_id: int, days: int = 7, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Mood logs from the last *days* days, oldest first."""
    since = (now or utcnow()) - timedelta(days=days)
    with get_session(engine) as session:
        moods = session.scalars(
            select(MoodLog)
            .where(MoodLog.dog_id == dog_id, MoodLog.created_at >= since)
            .order_by(MoodLog.created_at)
        ).all()
        names = _user_names(session, {m.user_id for m in moods})
        return [mood_to_dict(m, names.get(m.user_id, "Unknown")) for m in moods]


# ---------------------------------------------------------------------------
# Stat detail
# ---------------------------------------------------------------------------
def get_stat_detail(
    engine: Engine, dog_id: int, stat_type: str, now: datetime | None = None
) -> dict[str, Any]:
    """One stat with its contributing activities and chart series.

    Raises
    ------
    ValueError
        If *stat_type* is not one of INT / PHY / IMP / SOC.
    NotFoundError
        If the dog has no row for that stat.
    """
    stat_type = StatType(stat_type).value
    now = now or utcnow()
    history_start = now - timedelta(days=STAT_HISTORY_DAYS)

    with get_session(engine) as session:
        stat = session.scalar(
            select(DogStat).where(DogStat.dog_id == dog_id, DogStat.stat_type == stat_type)
        )
        if stat is None:
            raise NotFoundError(f"No {stat_type} stat for dog {dog_id}")

        rows = session.execute(
            select(Activity, ActivityStatGain.xp_amount)
            .join(ActivityStatGain, ActivityStatGain.activity_id == Activity.id)
            .where(Activity.dog_id == dog_id, ActivityStatGain.stat_type == stat_type)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        ).all()

        contributions = []
        for activity, xp_amount in rows:
            body = activity_to_dict(activity)
            body["xp_amount"] = xp_amount
            contributions.append((as_utc(activity.created_at), body))
        stat_body = stat_to_dict(stat)

    historical = [(ts, body) for ts, body in contributions if ts >= history_start]

    daily_xp: dict[str, int] = defaultdict(int)
    weekly_xp: dict[str, int] = defaultdict(int)
    frequency: Counter[str] = Counter()
    for ts, body in historical:
        daily_xp[ts.date().isoformat()] += body["xp_amount"]
        weekly_xp[week_start_of(ts.date()).isoformat()] += body["xp_amount"]
        frequency[body["activity_name"]] += 1

    return {
        "stat": stat_body,
        "recent_activities": [body for _, body in contributions[:STAT_DETAIL_RECENT]],
        "daily_xp_data": [{"date": d, "xp": xp} for d, xp in sorted(daily_xp.items())],
        "activity_frequency_data": [
            {"activity_name": name, "count": count}
            for name, count in frequency.most_common(TOP_ACTIVITIES)
        ],
        "weekly_xp_data": [{"week": w, "xp": xp} for w, xp in sorted(weekly_xp.items())],
    }


# ---------------------------------------------------------------------------
# Weekly summary
# ---------------------------------------------------------------------------
def mood_trend(first_half: list[str], second_half: list[str]) -> str:
    """Compare average mood scores of two halves of a period.

    An empty half counts as neutral.
    """
    neutral = MOOD_SCORES["neutral"]

    def _avg(moods: list[str]) -> float:
        if not moods:
            return float(neutral)
        return sum(MOOD_SCORES.get(m, neutral) for m in moods) / len(moods)

    before, after = _avg(first_half), _avg(second_half)
    if after > before + MOOD_TREND_THRESHOLD:
        return "improving"
    if after < before - MOOD_TREND_THRESHOLD:
        return "needs_attention"
    return "stable"


def get_weekly_summary(
    engine: Engine, dog_id: int, week_start: date, week_end: date
) -> dict[str, Any]:
    """Aggregate a (inclusive) date range for the end-of-week recap."""
    start, _ = day_bounds(week_start)
    _, end = day_bounds(week_end)
    midpoint = start + (end - start) / 2

    with get_session(engine) as session:
        activities = session.scalars(
            select(Activity).where(
                Activity.dog_id == dog_id,
                Activity.created_at >= start,
                Activity.created_at < end,
            )
        ).all()

        stat_xp: dict[str, int] = defaultdict(int)
        activity_counts: Counter[str] = Counter()
        total_minutes = 0
        for activity in activities:
            activity_counts[activity.activity_name] += 1
            total_minutes += activity.duration_minutes or 0
            for gain in activity.stat_gains:
                stat_xp[gain.stat_type] += gain.xp_amount
        total_xp = sum(stat_xp.values())

        goals = session.scalars(
            select(DailyGoal).where(
                DailyGoal.dog_id == dog_id,
                DailyGoal.day >= week_start,
                DailyGoal.day <= week_end,
            )
        ).all()
        days_goals_met = sum(1 for g in goals if g.goals_met)

        streak = session.scalar(select(Streak).where(Streak.dog_id == dog_id))
        stats = session.scalars(
            select(DogStat).where(DogStat.dog_id == dog_id).order_by(DogStat.stat_type)
        ).all()

        moods = session.scalars(
            select(MoodLog).where(
                MoodLog.dog_id == dog_id,
                MoodLog.created_at >= start,
                MoodLog.created_at < end,
            )
        ).all()

        highest_stat = None
        if stats:
            best = stats[0]
            for s in stats[1:]:
                if s.level > best.level:
                    best = s
            highest_stat = {"type": best.stat_type, "level": best.level}

        mood_insights = None
        if moods:
            counts = Counter(m.mood for m in moods)
            first = [m.mood for m in moods if as_utc(m.created_at) < midpoint]
            second = [m.mood for m in moods if as_utc(m.created_at) >= midpoint]
            mood_insights = {
                "most_common": counts.most_common(1)[0][0],
                "trend": mood_trend(first, second),
            }

        current_streak = streak.current_streak if streak else 0
        longest_streak = streak.longest_streak if streak else 0

    top = activity_counts.most_common(1)
    improved = max(stat_xp.items(), key=lambda kv: kv[1]) if stat_xp else None

    return {
        "total_activities": len(activities),
        "total_xp_gained": total_xp,
        "levels_gained": {
            "overall": total_xp // XP_PER_LEVEL,
            "stats": {st.value: stat_xp.get(st.value, 0) // XP_PER_LEVEL for st in StatType},
        },
        "days_goals_met": days_goals_met,
        "current_streak": current_streak,
        "longest_streak": longest_streak,
        "top_activity": {"name": top[0][0], "count": top[0][1]} if top else None,
        "total_activity_time": total_minutes,
        "highest_stat": highest_stat,
        "most_improved_stat": (
            {"type": improved[0], "xp_gained": improved[1]} if improved else None
        ),
        "mood_insights": mood_insights,
    }
