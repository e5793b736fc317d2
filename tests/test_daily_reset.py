"""
tests/test_daily_reset.py — Daily Goal Rollover & Streak Tests
===============================================================
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from corgiquest.database.models import DailyGoal, Streak
from corgiquest.services.daily_reset_service import reset_daily_goals

TODAY = date(2025, 3, 12)
YESTERDAY = date(2025, 3, 11)


def _add_goal(engine, dog_id, day, physical, mental):
    with Session(engine) as session:
        session.add(DailyGoal(
            dog_id=dog_id, day=day, physical_points=physical, mental_points=mental,
        ))
        session.commit()


def _add_streak(engine, dog_id, current=3, longest=5):
    with Session(engine) as session:
        session.add(Streak(
            dog_id=dog_id, current_streak=current, longest_streak=longest,
            last_activity_date=date(2025, 3, 10),
        ))
        session.commit()


def _streak(engine, dog_id) -> Streak:
    with Session(engine) as session:
        return session.scalar(select(Streak).where(Streak.dog_id == dog_id))


class TestResetDailyGoals:
    def test_creates_todays_goal(self, db_engine, household):
        result = reset_daily_goals(db_engine, today=TODAY)

        assert result == {
            "success": True,
            "dogs_processed": 1,
            "streaks_updated": 0,
            "date": "2025-03-12",
            "yesterday_date": "2025-03-11",
        }
        with Session(db_engine) as session:
            goal = session.scalar(select(DailyGoal).where(DailyGoal.day == TODAY))
            assert (goal.physical_points, goal.mental_points) == (0, 0)
            assert (goal.physical_goal, goal.mental_goal) == (50, 30)

    def test_existing_goal_for_today_kept(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], TODAY, 20, 10)
        reset_daily_goals(db_engine, today=TODAY)
        with Session(db_engine) as session:
            goals = session.scalars(select(DailyGoal).where(DailyGoal.day == TODAY)).all()
            assert len(goals) == 1
            assert goals[0].physical_points == 20

    def test_goals_met_extends_streak(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], YESTERDAY, 50, 30)
        _add_streak(db_engine, household["dog_id"], current=5, longest=5)

        result = reset_daily_goals(db_engine, today=TODAY)

        assert result["streaks_updated"] == 1
        streak = _streak(db_engine, household["dog_id"])
        assert (streak.current_streak, streak.longest_streak) == (6, 6)
        assert streak.last_activity_date == YESTERDAY

    def test_longest_kept_when_current_lower(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], YESTERDAY, 60, 40)
        _add_streak(db_engine, household["dog_id"], current=2, longest=10)

        reset_daily_goals(db_engine, today=TODAY)

        streak = _streak(db_engine, household["dog_id"])
        assert (streak.current_streak, streak.longest_streak) == (3, 10)

    def test_goal_missed_resets_streak(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], YESTERDAY, 50, 29)
        _add_streak(db_engine, household["dog_id"], current=7, longest=9)

        reset_daily_goals(db_engine, today=TODAY)

        streak = _streak(db_engine, household["dog_id"])
        assert (streak.current_streak, streak.longest_streak) == (0, 9)
        assert streak.last_activity_date == YESTERDAY

    def test_no_yesterday_record_leaves_streak(self, db_engine, household):
        _add_streak(db_engine, household["dog_id"], current=4, longest=6)

        result = reset_daily_goals(db_engine, today=TODAY)

        assert result["streaks_updated"] == 0
        streak = _streak(db_engine, household["dog_id"])
        assert (streak.current_streak, streak.longest_streak) == (4, 6)
        assert streak.last_activity_date == date(2025, 3, 10)

    def test_second_run_same_day_does_not_double_increment(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], YESTERDAY, 50, 30)
        _add_streak(db_engine, household["dog_id"], current=1, longest=1)

        first = reset_daily_goals(db_engine, today=TODAY)
        second = reset_daily_goals(db_engine, today=TODAY)

        assert first["streaks_updated"] == 1
        assert second["streaks_updated"] == 0
        streak = _streak(db_engine, household["dog_id"])
        assert streak.current_streak == 2
        with Session(db_engine) as session:
            assert len(session.scalars(select(DailyGoal).where(DailyGoal.day == TODAY)).all()) == 1

    def test_dog_without_streak_gets_goal_only(self, db_engine, household):
        _add_goal(db_engine, household["dog_id"], YESTERDAY, 50, 30)
        result = reset_daily_goals(db_engine, today=TODAY)
        assert result["dogs_processed"] == 1
        assert result["streaks_updated"] == 0
        assert _streak(db_engine, household["dog_id"]) is None

    def test_no_dogs(self, db_engine):
        result = reset_daily_goals(db_engine, today=TODAY)
        assert result["dogs_processed"] == 0
