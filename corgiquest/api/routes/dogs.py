"""
corgiquest.api.routes.dogs — Dog profile, feeds and logging endpoints
======================================================================
"""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from corgiquest.api.deps import get_engine
from corgiquest.constants import FEED_LIMIT, today_utc
from corgiquest.database.models import Mood, StatType
from corgiquest.engine.activities import calculate_activity_result
from corgiquest.services import activity_service, dog_service

router = APIRouter(prefix="/dogs", tags=["dogs"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class StatGainIn(BaseModel):
    stat_type: StatType
    xp_amount: int = Field(ge=0)


class LogActivityRequest(BaseModel):
    user_id: int
    activity_name: str
    description: str | None = None
    duration_minutes: int | None = Field(default=None, ge=0)
    # Omit these three to derive them from the activity tables
    stat_gains: list[StatGainIn] | None = None
    physical_points: int | None = Field(default=None, ge=0)
    mental_points: int | None = Field(default=None, ge=0)


class LogMoodRequest(BaseModel):
    user_id: int
    mood: Mood
    note: str | None = None
    activity_id: int | None = None


# ---------------------------------------------------------------------------
# Profile, goals, streak
# ---------------------------------------------------------------------------
@router.get("/{dog_id}")
def get_profile(
    dog_id: int,
    mood_days: int | None = Query(None, ge=1, le=90),
    engine=Depends(get_engine),
):
    """Dog with its four stats (and mood history when ``mood_days`` is set)."""
    return dog_service.get_dog_profile(engine, dog_id, mood_days=mood_days)


@router.get("/{dog_id}/goals")
def get_goals(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_daily_goals(engine, dog_id)


@router.get("/{dog_id}/streak")
def get_streak(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_streak(engine, dog_id)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------
@router.get("/{dog_id}/activities")
def get_activity_feed(
    dog_id: int,
    limit: int = Query(FEED_LIMIT, ge=1, le=100),
    engine=Depends(get_engine),
):
    return dog_service.get_activity_feed(engine, dog_id, limit=limit)


@router.get("/{dog_id}/activities/today")
def get_todays_activities(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_todays_activities(engine, dog_id)


@router.post("/{dog_id}/activities", status_code=201)
def log_activity(dog_id: int, body: LogActivityRequest, engine=Depends(get_engine)):
    """Log an activity.  XP and points default to the standard tables."""
    if body.stat_gains is None or body.physical_points is None or body.mental_points is None:
        computed = calculate_activity_result(body.activity_name, body.duration_minutes)
        stat_gains = body.stat_gains if body.stat_gains is not None else computed.stat_gains
        physical = body.physical_points if body.physical_points is not None else computed.physical_points
        mental = body.mental_points if body.mental_points is not None else computed.mental_points
    else:
        stat_gains, physical, mental = body.stat_gains, body.physical_points, body.mental_points

    result = activity_service.log_activity(
        engine,
        dog_id=dog_id,
        user_id=body.user_id,
        activity_name=body.activity_name,
        stat_gains=stat_gains,
        physical_points=physical,
        mental_points=mental,
        description=body.description,
        duration_minutes=body.duration_minutes,
    )
    return result.to_dict()


# ---------------------------------------------------------------------------
# Moods
# ---------------------------------------------------------------------------
@router.get("/{dog_id}/moods")
def get_mood_feed(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_mood_feed(engine, dog_id)


@router.get("/{dog_id}/moods/latest")
def get_latest_mood(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_latest_mood(engine, dog_id)


@router.get("/{dog_id}/moods/today")
def get_todays_moods(dog_id: int, engine=Depends(get_engine)):
    return dog_service.get_todays_moods(engine, dog_id)


@router.get("/{dog_id}/moods/history")
def get_mood_history(
    dog_id: int,
    days: int = Query(7, ge=1, le=90),
    engine=Depends(get_engine),
):
    return dog_service.get_mood_history(engine, dog_id, days=days)


@router.post("/{dog_id}/moods", status_code=201)
def log_mood(dog_id: int, body: LogMoodRequest, engine=Depends(get_engine)):
    return activity_service.log_mood(
        engine,
        dog_id=dog_id,
        user_id=body.user_id,
        mood=body.mood.value,
        note=body.note,
        activity_id=body.activity_id,
    )


# ---------------------------------------------------------------------------
# Stats & summaries
# ---------------------------------------------------------------------------
@router.get("/{dog_id}/stats/{stat_type}")
def get_stat_detail(dog_id: int, stat_type: str, engine=Depends(get_engine)):
    return dog_service.get_stat_detail(engine, dog_id, stat_type.upper())


@router.get("/{dog_id}/weekly-summary")
def get_weekly_summary(
    dog_id: int,
    week_start: date | None = Query(None),
    week_end: date | None = Query(None),
    engine=Depends(get_engine),
):
    """Summary for ``[week_start, week_end]``; defaults to the last 7 days."""
    end = week_end or today_utc()
    start = week_start or end - timedelta(days=6)
    return dog_service.get_weekly_summary(engine, dog_id, start, end)
