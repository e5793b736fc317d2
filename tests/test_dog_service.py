"""
tests/test_dog_service.py — Dashboard Query Tests
==================================================

Profile, feeds, stat detail and the weekly summary, against in-memory
SQLite.  Activities go in through ``log_activity`` so the stat and goal
rows stay consistent with what the API would produce.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from corgiquest.database.models import DailyGoal, MoodLog, Streak, User
from corgiquest.errors import NotFoundError
from corgiquest.services.activity_service import log_activity
from corgiquest.services.dog_service import (
    get_activity_feed,
    get_daily_goals,
    get_dog_profile,
    get_latest_mood,
    get_mood_history,
    get_stat_detail,
    get_streak,
    get_todays_activities,
    get_todays_moods,
    get_weekly_summary,
    mood_trend,
    week_start_of,
)

NOW = datetime(2025, 3, 12, 18, 0, tzinfo=UTC)  # a Wednesday
TODAY = NOW.date()


def _walk(engine, ids, when, minutes=30, user="alice_id", name="Walk", gains=None):
    return log_activity(
        engine,
        dog_id=ids["dog_id"],
        user_id=ids[user],
        activity_name=name,
        stat_gains=gains or [{"stat_type": "PHY", "xp_amount": 45}],
        physical_points=30,
        mental_points=0,
        duration_minutes=minutes,
        now=when,
    )


def _mood(engine, ids, mood, when, user="bob_id"):
    with Session(engine) as session:
        session.add(MoodLog(dog_id=ids["dog_id"], user_id=ids[user], mood=mood, created_at=when))
        session.commit()


class TestWeekStart:
    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2025, 3, 12), date(2025, 3, 9)),   # Wednesday
            (date(2025, 3, 9), date(2025, 3, 9)),    # Sunday
            (date(2025, 3, 15), date(2025, 3, 9)),   # Saturday
        ],
    )
    def test_sunday_on_or_before(self, day, expected):
        assert week_start_of(day) == expected


class TestProfile:
    def test_profile_with_stats(self, db_engine, household):
        profile = get_dog_profile(db_engine, household["dog_id"])
        assert profile["dog"]["name"] == "Bumi"
        assert [s["stat_type"] for s in profile["stats"]] == ["IMP", "INT", "PHY", "SOC"]
        assert "mood_history" not in profile

    def test_profile_with_mood_history(self, db_engine, household):
        _mood(db_engine, household, "calm", NOW - timedelta(days=2))
        _mood(db_engine, household, "tired", NOW - timedelta(days=10))

        profile = get_dog_profile(db_engine, household["dog_id"], mood_days=7, now=NOW)
        assert [m["mood"] for m in profile["mood_history"]] == ["calm"]

    def test_unknown_dog(self, db_engine):
        with pytest.raises(NotFoundError):
            get_dog_profile(db_engine, 404)

    def test_goals_and_streak_after_logging(self, db_engine, household):
        _walk(db_engine, household, NOW)
        goals = get_daily_goals(db_engine, household["dog_id"], TODAY)
        assert goals["physical_points"] == 30
        assert goals["goals_met"] is False
        assert get_streak(db_engine, household["dog_id"])["last_activity_date"] == "2025-03-12"

    def test_missing_goal_and_streak(self, db_engine, household):
        assert get_daily_goals(db_engine, household["dog_id"], TODAY) is None
        assert get_streak(db_engine, household["dog_id"]) is None


class TestFeeds:
    def test_activity_feed_newest_first_with_gains(self, db_engine, household):
        _walk(db_engine, household, NOW - timedelta(hours=2))
        _walk(db_engine, household, NOW, user="bob_id", name="Fetch",
              gains=[{"stat_type": "PHY", "xp_amount": 21}, {"stat_type": "IMP", "xp_amount": 9}])

        feed = get_activity_feed(db_engine, household["dog_id"])

        assert [a["activity_name"] for a in feed] == ["Fetch", "Walk"]
        assert feed[0]["user_name"] == "Bob"
        assert {g["stat_type"] for g in feed[0]["stat_gains"]} == {"PHY", "IMP"}

    def test_feed_limit(self, db_engine, household):
        for i in range(5):
            _walk(db_engine, household, NOW - timedelta(minutes=i))
        assert len(get_activity_feed(db_engine, household["dog_id"], limit=3)) == 3

    def test_deleted_user_shows_unknown(self, db_engine, household):
        with Session(db_engine) as session:
            ghost = User(name="Ghost", email="ghost@example.com",
                         household_id=household["household_id"])
            session.add(ghost)
            session.commit()
            ids = {**household, "ghost_id": ghost.id}

        _walk(db_engine, ids, NOW, user="ghost_id")
        with Session(db_engine) as session:
            session.delete(session.get(User, ids["ghost_id"]))
            session.commit()

        assert get_activity_feed(db_engine, household["dog_id"])[0]["user_name"] == "Unknown"

    def test_todays_activities_only(self, db_engine, household):
        _walk(db_engine, household, NOW - timedelta(days=1))
        _walk(db_engine, household, NOW)
        todays = get_todays_activities(db_engine, household["dog_id"], TODAY)
        assert len(todays) == 1
        assert todays[0]["user_name"] == "Alice"

    def test_mood_feeds(self, db_engine, household):
        _mood(db_engine, household, "anxious", NOW - timedelta(days=1))
        _mood(db_engine, household, "playful", NOW - timedelta(hours=1))

        assert get_latest_mood(db_engine, household["dog_id"])["mood"] == "playful"
        today = get_todays_moods(db_engine, household["dog_id"], TODAY)
        assert today["has_mood_today"] is True
        assert today["count"] == 1
        history = get_mood_history(db_engine, household["dog_id"], days=7, now=NOW)
        assert [m["mood"] for m in history] == ["anxious", "playful"]

    def test_no_moods(self, db_engine, household):
        assert get_latest_mood(db_engine, household["dog_id"]) is None
        assert get_todays_moods(db_engine, household["dog_id"], TODAY) == {
            "has_mood_today": False, "count": 0, "moods": [],
        }


class TestStatDetail:
    def test_series(self, db_engine, household):
        _walk(db_engine, household, NOW - timedelta(days=40))   # outside 30-day window
        _walk(db_engine, household, NOW - timedelta(days=1))
        _walk(db_engine, household, NOW)
        _walk(db_engine, household, NOW, name="Fetch",
              gains=[{"stat_type": "PHY", "xp_amount": 10}])

        detail = get_stat_detail(db_engine, household["dog_id"], "PHY", now=NOW)

        assert detail["stat"]["stat_type"] == "PHY"
        assert len(detail["recent_activities"]) == 4
        assert detail["daily_xp_data"] == [
            {"date": "2025-03-11", "xp": 45},
            {"date": "2025-03-12", "xp": 55},
        ]
        assert detail["activity_frequency_data"][0] == {"activity_name": "Walk", "count": 2}
        assert detail["weekly_xp_data"] == [{"week": "2025-03-09", "xp": 100}]

    def test_unrelated_stat_has_no_contributions(self, db_engine, household):
        _walk(db_engine, household, NOW)
        detail = get_stat_detail(db_engine, household["dog_id"], "SOC", now=NOW)
        assert detail["recent_activities"] == []
        assert detail["daily_xp_data"] == []

    def test_bad_stat_type(self, db_engine, household):
        with pytest.raises(ValueError):
            get_stat_detail(db_engine, household["dog_id"], "CHA")

    def test_missing_stat_row(self, db_engine, household):
        with pytest.raises(NotFoundError):
            get_stat_detail(db_engine, 404, "PHY")


class TestMoodTrend:
    def test_improving(self):
        assert mood_trend(["reactive", "anxious"], ["calm", "playful"]) == "improving"

    def test_needs_attention(self):
        assert mood_trend(["calm"], ["anxious"]) == "needs_attention"

    def test_stable_within_threshold(self):
        assert mood_trend(["playful"], ["calm"]) == "stable"

    def test_empty_half_is_neutral(self):
        assert mood_trend([], ["neutral"]) == "stable"
        assert mood_trend([], ["calm"]) == "improving"


class TestWeeklySummary:
    def test_aggregates_week(self, db_engine, household):
        week_start, week_end = date(2025, 3, 9), date(2025, 3, 15)
        _walk(db_engine, household, datetime(2025, 3, 9, 9, tzinfo=UTC), minutes=30)
        _walk(db_engine, household, datetime(2025, 3, 10, 9, tzinfo=UTC), minutes=20,
              gains=[{"stat_type": "PHY", "xp_amount": 80}])
        _walk(db_engine, household, datetime(2025, 3, 11, 9, tzinfo=UTC), name="Puzzle Toy",
              minutes=None, gains=[{"stat_type": "INT", "xp_amount": 30}])
        _walk(db_engine, household, datetime(2025, 3, 20, 9, tzinfo=UTC))  # next week

        with Session(db_engine) as session:
            session.add(DailyGoal(dog_id=household["dog_id"], day=date(2025, 3, 12),
                                  physical_points=50, mental_points=30))
            streak = session.scalar(select(Streak).where(Streak.dog_id == household["dog_id"]))
            streak.current_streak, streak.longest_streak = 3, 8
            session.commit()

        _mood(db_engine, household, "anxious", datetime(2025, 3, 9, 20, tzinfo=UTC))
        _mood(db_engine, household, "anxious", datetime(2025, 3, 10, 20, tzinfo=UTC))
        _mood(db_engine, household, "calm", datetime(2025, 3, 14, 20, tzinfo=UTC))

        summary = get_weekly_summary(db_engine, household["dog_id"], week_start, week_end)

        assert summary["total_activities"] == 3
        assert summary["total_xp_gained"] == 155
        assert summary["levels_gained"]["overall"] == 1
        assert summary["levels_gained"]["stats"] == {"INT": 0, "PHY": 1, "IMP": 0, "SOC": 0}
        assert summary["days_goals_met"] == 1
        assert (summary["current_streak"], summary["longest_streak"]) == (3, 8)
        assert summary["top_activity"] == {"name": "Walk", "count": 2}
        assert summary["total_activity_time"] == 50
        assert summary["highest_stat"] == {"type": "PHY", "level": 2}
        assert summary["most_improved_stat"] == {"type": "PHY", "xp_gained": 125}
        assert summary["mood_insights"] == {"most_common": "anxious", "trend": "improving"}

    def test_empty_week(self, db_engine, household):
        summary = get_weekly_summary(db_engine, household["dog_id"], date(2025, 1, 5), date(2025, 1, 11))
        assert summary["total_activities"] == 0
        assert summary["top_activity"] is None
        assert summary["most_improved_stat"] is None
        assert summary["mood_insights"] is None
        assert summary["highest_stat"] == {"type": "IMP", "level": 1}
