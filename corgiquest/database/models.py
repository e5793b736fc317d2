"""
corgiquest.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- households          — Shared account grouping partners and one dog
- users               — Partners in a household (the people logging)
- dogs                — The trained pet; aggregate level / XP
- dog_stats           — Exactly one row per (dog, stat_type)
- activities          — Immutable training log
- activity_stat_gains — Per-stat XP awarded by an activity
- daily_goals         — One row per (dog, calendar day)
- streaks             — One row per dog; consecutive goal-met days
- presence            — Where each partner currently is in the app
- mood_logs           — Immutable mood observations
- ai_recommendations  — One cached suggestion payload per (dog, day)
- training_tips       — One cached tip payload per (dog, day)
- cosmetic_items      — Unlockable cosmetics, gated by dog level
- equipped_items      — At most one equipped cosmetic per dog
- newly_unlocked_items — "New!" markers for freshly unlocked cosmetics
- waitlist_entries    — Waitlist signups with referral bookkeeping
- updates_subscribers — Product-update mailing list
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from corgiquest.constants import MENTAL_GOAL, PHYSICAL_GOAL, XP_PER_LEVEL, utcnow


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Corgi Quest ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class StatType(enum.StrEnum):
    """The four fixed progression categories."""
    INT = "INT"  # Intelligence
    PHY = "PHY"  # Physical
    IMP = "IMP"  # Impulse control
    SOC = "SOC"  # Social


class Mood(enum.StrEnum):
    CALM = "calm"
    ANXIOUS = "anxious"
    REACTIVE = "reactive"
    PLAYFUL = "playful"
    TIRED = "tired"
    NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Households & users
# ---------------------------------------------------------------------------
class Household(Base):
    __tablename__ = "households"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    users: Mapped[list[User]] = relationship(back_populates="household")
    dogs: Mapped[list[Dog]] = relationship(back_populates="household")

    def __repr__(self) -> str:
        return f"<Household id={self.id}>"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    household_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    avatar_url: Mapped[str | None] = mapped_column(String(500), default=None)
    title: Mapped[str | None] = mapped_column(String(100), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    household: Mapped[Household] = relationship(back_populates="users")

    __table_args__ = (
        Index("ix_users_household", "household_id"),
        Index("ix_users_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Dogs & stats
# ---------------------------------------------------------------------------
class Dog(Base):
    __tablename__ = "dogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    household_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    overall_level: Mapped[int] = mapped_column(Integer, default=1)
    overall_xp: Mapped[int] = mapped_column(Integer, default=0)
    xp_to_next_level: Mapped[int] = mapped_column(Integer, default=XP_PER_LEVEL)
    photo_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    household: Mapped[Household] = relationship(back_populates="dogs")
    stats: Mapped[list[DogStat]] = relationship(
        back_populates="dog", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_dogs_household", "household_id"),
    )

    def __repr__(self) -> str:
        return f"<Dog id={self.id} name={self.name!r} lvl={self.overall_level}>"


class DogStat(Base):
    __tablename__ = "dog_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    stat_type: Mapped[str] = mapped_column(String(3), nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    xp_to_next_level: Mapped[int] = mapped_column(Integer, default=XP_PER_LEVEL)

    dog: Mapped[Dog] = relationship(back_populates="stats")

    __table_args__ = (
        UniqueConstraint("dog_id", "stat_type", name="uq_dog_stats_dog_stat"),
    )

    def __repr__(self) -> str:
        return f"<DogStat dog={self.dog_id} {self.stat_type} lvl={self.level} xp={self.xp}>"


# ---------------------------------------------------------------------------
# Activities: immutable training log
# ---------------------------------------------------------------------------
class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    activity_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, default=None)
    physical_points: Mapped[int] = mapped_column(Integer, default=0)
    mental_points: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    stat_gains: Mapped[list[ActivityStatGain]] = relationship(
        back_populates="activity", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_activities_dog_created", "dog_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Activity id={self.id} dog={self.dog_id} name={self.activity_name!r}>"


class ActivityStatGain(Base):
    __tablename__ = "activity_stat_gains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    stat_type: Mapped[str] = mapped_column(String(3), nullable=False)
    xp_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    activity: Mapped[Activity] = relationship(back_populates="stat_gains")

    __table_args__ = (
        Index("ix_activity_stat_gains_activity", "activity_id"),
        Index("ix_activity_stat_gains_stat", "stat_type"),
    )

    def __repr__(self) -> str:
        return f"<ActivityStatGain activity={self.activity_id} {self.stat_type}+{self.xp_amount}>"


# ---------------------------------------------------------------------------
# DailyGoal: running stimulation totals per calendar day
# ---------------------------------------------------------------------------
class DailyGoal(Base):
    __tablename__ = "daily_goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    physical_points: Mapped[int] = mapped_column(Integer, default=0)
    physical_goal: Mapped[int] = mapped_column(Integer, default=PHYSICAL_GOAL)
    mental_points: Mapped[int] = mapped_column(Integer, default=0)
    mental_goal: Mapped[int] = mapped_column(Integer, default=MENTAL_GOAL)

    __table_args__ = (
        UniqueConstraint("dog_id", "date", name="uq_daily_goals_dog_date"),
    )

    @property
    def goals_met(self) -> bool:
        return (
            self.physical_points >= self.physical_goal
            and self.mental_points >= self.mental_goal
        )

    def __repr__(self) -> str:
        return (
            f"<DailyGoal dog={self.dog_id} day={self.day} "
            f"phy={self.physical_points}/{self.physical_goal} "
            f"men={self.mental_points}/{self.mental_goal}>"
        )


# ---------------------------------------------------------------------------
# Streak: one row per dog
# ---------------------------------------------------------------------------
class Streak(Base):
    __tablename__ = "streaks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_activity_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Day whose DailyGoal the reset job last judged; guards against re-runs
    last_evaluated_date: Mapped[date | None] = mapped_column(Date, default=None)

    def __repr__(self) -> str:
        return (
            f"<Streak dog={self.dog_id} current={self.current_streak} "
            f"longest={self.longest_streak}>"
        )


# ---------------------------------------------------------------------------
# Presence: one row per user
# ---------------------------------------------------------------------------
class Presence(Base):
    __tablename__ = "presence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    location: Mapped[str] = mapped_column(String(100), default="")
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Presence user={self.user_id} location={self.location!r}>"


# ---------------------------------------------------------------------------
# MoodLog: immutable mood observations
# ---------------------------------------------------------------------------
class MoodLog(Base):
    __tablename__ = "mood_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    mood: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str | None] = mapped_column(Text, default=None)
    activity_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_mood_logs_dog_created", "dog_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<MoodLog id={self.id} dog={self.dog_id} mood={self.mood!r}>"


# ---------------------------------------------------------------------------
# Per-day caches: payloads are JSON text produced by hosted services
# ---------------------------------------------------------------------------
class AIRecommendation(Base):
    __tablename__ = "ai_recommendations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    recommendations: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("dog_id", "date", name="uq_ai_recommendations_dog_date"),
    )

    def __repr__(self) -> str:
        return f"<AIRecommendation dog={self.dog_id} day={self.day}>"


class TrainingTipCache(Base):
    __tablename__ = "training_tips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    tips: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("dog_id", "date", name="uq_training_tips_dog_date"),
    )

    def __repr__(self) -> str:
        return f"<TrainingTipCache dog={self.dog_id} day={self.day}>"


# ---------------------------------------------------------------------------
# Cosmetics
# ---------------------------------------------------------------------------
class CosmeticItem(Base):
    __tablename__ = "cosmetic_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    unlock_level: Mapped[int] = mapped_column(Integer, nullable=False)
    item_type: Mapped[str] = mapped_column(String(30), nullable=False)
    icon: Mapped[str] = mapped_column(String(20), nullable=False)
    ai_prompt: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_cosmetic_items_unlock_level", "unlock_level"),
    )

    def __repr__(self) -> str:
        return f"<CosmeticItem id={self.id} name={self.name!r} lvl={self.unlock_level}>"


class EquippedItem(Base):
    __tablename__ = "equipped_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cosmetic_items.id", ondelete="CASCADE"), nullable=False
    )
    generated_image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    equipped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    item: Mapped[CosmeticItem] = relationship()

    def __repr__(self) -> str:
        return f"<EquippedItem dog={self.dog_id} item={self.item_id}>"


class NewlyUnlockedItem(Base):
    __tablename__ = "newly_unlocked_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dog_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cosmetic_items.id", ondelete="CASCADE"), nullable=False
    )
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("ix_newly_unlocked_dog_item", "dog_id", "item_id"),
    )

    def __repr__(self) -> str:
        return f"<NewlyUnlockedItem dog={self.dog_id} item={self.item_id}>"


# ---------------------------------------------------------------------------
# Waitlist & mailing list
# ---------------------------------------------------------------------------
class WaitlistEntry(Base):
    __tablename__ = "waitlist_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # Not unique: codes are random and collisions are not checked
    referral_code: Mapped[str] = mapped_column(String(16), nullable=False)
    referred_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("waitlist_entries.id", ondelete="SET NULL"), nullable=True
    )
    referral_count: Mapped[int] = mapped_column(Integer, default=0)
    early_access: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_waitlist_referral_code", "referral_code"),
        Index("ix_waitlist_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<WaitlistEntry id={self.id} email={self.email!r} code={self.referral_code!r}>"


class UpdatesSubscriber(Base):
    __tablename__ = "updates_subscribers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    source: Mapped[str | None] = mapped_column(String(100), default=None)
    subscribed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_updates_subscribers_subscribed_at", "subscribed_at"),
    )

    def __repr__(self) -> str:
        return f"<UpdatesSubscriber email={self.email!r}>"
