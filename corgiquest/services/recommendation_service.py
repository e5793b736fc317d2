"""
corgiquest.services.recommendation_service — Per-Day Recommendation Cache
==========================================================================

One cached payload per (dog, calendar day).  Writers (activity / mood
logging) call :func:`delete_cached_recommendation` inside their own
session so the invalidation commits with the write that caused it.

:func:`generate_recommendations` fills the cache from the hosted LLM on a
miss.  It is async: DB work goes through :func:`run_db`, the model call
goes through ``AsyncOpenAI``.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from corgiquest.constants import as_utc, today_utc, utcnow
from corgiquest.database.engine import get_session, run_db
from corgiquest.database.models import (
    Activity,
    AIRecommendation,
    DailyGoal,
    DogStat,
    MoodLog,
)
from corgiquest.engine.prompts import RECOMMENDATION_SYSTEM_PROMPT, render_user_prompt
from corgiquest.errors import UpstreamServiceError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

HISTORY_DAYS = 7


# ---------------------------------------------------------------------------
# LLM response contract
# ---------------------------------------------------------------------------
class RecommendedStatGain(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stat_type: str = Field(alias="statType")
    xp_amount: int = Field(alias="xpAmount")


class Recommendation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_name: str = Field(alias="activityName")
    reasoning: str
    expected_mood_impact: str = Field(alias="expectedMoodImpact")
    stat_gains: list[RecommendedStatGain] = Field(alias="statGains", default_factory=list)
    physical_points: int = Field(alias="physicalPoints", default=0)
    mental_points: int = Field(alias="mentalPoints", default=0)
    duration_minutes: int | None = Field(alias="durationMinutes", default=None)


class RecommendationPayload(BaseModel):
    recommendations: list[Recommendation]


# ---------------------------------------------------------------------------
# Cache primitives
# ---------------------------------------------------------------------------
def delete_cached_recommendation(session: Session, dog_id: int, day: date) -> bool:
    """Delete the (dog, day) row inside *session*.  True if a row went away."""
    result = session.execute(
        delete(AIRecommendation).where(
            AIRecommendation.dog_id == dog_id, AIRecommendation.day == day
        )
    )
    return bool(result.rowcount)


def cache_recommendations(
    engine: Engine, dog_id: int, recommendations: Any, today: date | None = None
) -> dict[str, Any]:
    """Upsert today's payload: overwrite if a row exists, else insert."""
    day = today or today_utc()
    payload = json.dumps(recommendations)

    with get_session(engine) as session:
        row = session.scalar(
            select(AIRecommendation).where(
                AIRecommendation.dog_id == dog_id, AIRecommendation.day == day
            )
        )
        if row is not None:
            row.recommendations = payload
            row.created_at = utcnow()
            updated = True
        else:
            session.add(AIRecommendation(dog_id=dog_id, day=day, recommendations=payload))
            updated = False

    return {"success": True, "updated": updated}


def invalidate_recommendation_cache(
    engine: Engine, dog_id: int, today: date | None = None
) -> dict[str, Any]:
    day = today or today_utc()
    with get_session(engine) as session:
        deleted = delete_cached_recommendation(session, dog_id, day)
    if deleted:
        logger.info("Invalidated recommendation cache for dog %d on %s.", dog_id, day)
    return {"success": True, "deleted": deleted}


def get_cached_recommendations(
    engine: Engine, dog_id: int, day: date | None = None
) -> dict[str, Any] | None:
    """Return ``{recommendations, created_at}`` or ``None`` on a miss.

    A payload that fails to parse is logged and treated as a miss.  Passing
    a week's end date as *day* reads the weekly-summary cache.
    """
    day = day or today_utc()
    with get_session(engine) as session:
        row = session.scalar(
            select(AIRecommendation).where(
                AIRecommendation.dog_id == dog_id, AIRecommendation.day == day
            )
        )
        if row is None:
            return None
        raw, created_at = row.recommendations, as_utc(row.created_at)

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Unparseable cached recommendations for dog %d on %s.", dog_id, day)
        return None

    return {
        "recommendations": parsed,
        "created_at": created_at.isoformat() if created_at else None,
    }


# ---------------------------------------------------------------------------
# Prompt context
# ---------------------------------------------------------------------------
def build_recommendation_context(
    engine: Engine, dog_id: int, now: datetime | None = None
) -> dict[str, Any]:
    """Collect the last week of moods and activities, stats and today's goals."""
    now = now or utcnow()
    since = now - timedelta(days=HISTORY_DAYS)

    with get_session(engine) as session:
        moods = session.scalars(
            select(MoodLog)
            .where(MoodLog.dog_id == dog_id, MoodLog.created_at >= since)
            .order_by(MoodLog.created_at)
        ).all()
        activities = session.scalars(
            select(Activity)
            .where(Activity.dog_id == dog_id, Activity.created_at >= since)
            .order_by(Activity.created_at)
        ).all()
        stats = session.scalars(
            select(DogStat).where(DogStat.dog_id == dog_id).order_by(DogStat.stat_type)
        ).all()
        goal = session.scalar(
            select(DailyGoal).where(DailyGoal.dog_id == dog_id, DailyGoal.day == now.date())
        )

        mood_summary = []
        for m in moods:
            entry: dict[str, Any] = {"mood": m.mood, "timestamp": as_utc(m.created_at).isoformat()}
            if m.note:
                entry["note"] = m.note
            mood_summary.append(entry)

        activity_summary = []
        for a in activities:
            entry = {
                "name": a.activity_name,
                "statGains": [
                    {"statType": g.stat_type, "xpAmount": g.xp_amount} for g in a.stat_gains
                ],
                "physicalPoints": a.physical_points,
                "mentalPoints": a.mental_points,
                "timestamp": as_utc(a.created_at).isoformat(),
            }
            if a.duration_minutes is not None:
                entry["duration"] = a.duration_minutes
            activity_summary.append(entry)

        stats_summary = [
            {
                "type": s.stat_type,
                "level": s.level,
                "xp": s.xp,
                "xpToNextLevel": s.xp_to_next_level,
                "progress": round(s.xp / s.xp_to_next_level * 100) if s.xp_to_next_level else 0,
            }
            for s in stats
        ]

        goals_summary = None
        if goal is not None:
            goals_summary = {
                "physical": {
                    "current": goal.physical_points,
                    "goal": goal.physical_goal,
                    "remaining": max(0, goal.physical_goal - goal.physical_points),
                },
                "mental": {
                    "current": goal.mental_points,
                    "goal": goal.mental_goal,
                    "remaining": max(0, goal.mental_goal - goal.mental_points),
                },
            }

    return {
        "moods": mood_summary,
        "activities": activity_summary,
        "stats": stats_summary,
        "goals": goals_summary,
    }


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------
async def generate_recommendations(
    engine: Engine,
    dog_id: int,
    client: AsyncOpenAI | None = None,
    model: str = "gpt-4o-mini",
    now: datetime | None = None,
) -> dict[str, Any]:
    """Return today's recommendations, asking the model only on a cache miss.

    Raises
    ------
    UpstreamServiceError
        500 if no API key is configured, 502 if the model call fails or
        returns a payload that does not validate.
    """
    now = now or utcnow()
    today = now.date()

    cached = await run_db(get_cached_recommendations, engine, dog_id, today)
    if cached is not None:
        return {**cached, "cached": True}

    if client is None:
        api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not api_key:
            raise UpstreamServiceError(500, "OPENAI_API_KEY not configured")
        client = AsyncOpenAI(api_key=api_key)

    context = await run_db(build_recommendation_context, engine, dog_id, now)
    user_prompt = render_user_prompt(
        context["moods"], context["activities"], context["stats"], context["goals"]
    )

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
            max_tokens=2000,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""
        payload = RecommendationPayload.model_validate_json(content)
    except OpenAIError as exc:
        logger.error("Recommendation request failed for dog %d: %s", dog_id, exc)
        raise UpstreamServiceError(502, "Failed to generate recommendations", str(exc)) from exc
    except ValidationError as exc:
        logger.error("Invalid recommendation payload for dog %d: %s", dog_id, exc)
        raise UpstreamServiceError(502, "Invalid response from recommendation model") from exc

    recommendations = [r.model_dump() for r in payload.recommendations]
    await run_db(cache_recommendations, engine, dog_id, recommendations, today)
    logger.info("Generated %d recommendations for dog %d.", len(recommendations), dog_id)

    return {
        "recommendations": recommendations,
        "created_at": now.isoformat(),
        "cached": False,
    }
