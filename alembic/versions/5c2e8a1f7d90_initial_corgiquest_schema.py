"""Initial Corgi Quest schema

Revision ID: 5c2e8a1f7d90
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e8a1f7d90"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    """Create households, dogs, progression, logging, cache and waitlist tables."""
    op.create_table(
        "households",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _created_at(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "household_id", sa.Integer(),
            sa.ForeignKey("households.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("title", sa.String(100), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_household", "users", ["household_id"])
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "dogs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "household_id", sa.Integer(),
            sa.ForeignKey("households.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("overall_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("overall_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_to_next_level", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("photo_url", sa.String(500), nullable=True),
        _created_at(),
    )
    op.create_index("ix_dogs_household", "dogs", ["household_id"])

    op.create_table(
        "dog_stats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stat_type", sa.String(3), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_to_next_level", sa.Integer(), nullable=False, server_default="100"),
        sa.UniqueConstraint("dog_id", "stat_type", name="uq_dog_stats_dog_stat"),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("activity_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("physical_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mental_points", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_activities_dog_created", "activities", ["dog_id", "created_at"])

    op.create_table(
        "activity_stat_gains",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "activity_id", sa.Integer(),
            sa.ForeignKey("activities.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("stat_type", sa.String(3), nullable=False),
        sa.Column("xp_amount", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_activity_stat_gains_activity", "activity_stat_gains", ["activity_id"])
    op.create_index("ix_activity_stat_gains_stat", "activity_stat_gains", ["stat_type"])

    op.create_table(
        "daily_goals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("physical_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("physical_goal", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("mental_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mental_goal", sa.Integer(), nullable=False, server_default="30"),
        sa.UniqueConstraint("dog_id", "date", name="uq_daily_goals_dog_date"),
    )

    op.create_table(
        "streaks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "dog_id", sa.Integer(),
            sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=False),
        sa.Column("last_evaluated_date", sa.Date(), nullable=True),
    )

    op.create_table(
        "presence",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("location", sa.String(100), nullable=False, server_default=""),
        _created_at("last_seen"),
    )

    op.create_table(
        "mood_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("mood", sa.String(20), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column(
            "activity_id", sa.Integer(),
            sa.ForeignKey("activities.id", ondelete="SET NULL"), nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_mood_logs_dog_created", "mood_logs", ["dog_id", "created_at"])

    for table, payload, constraint in (
        ("ai_recommendations", "recommendations", "uq_ai_recommendations_dog_date"),
        ("training_tips", "tips", "uq_training_tips_dog_date"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
            sa.Column("date", sa.Date(), nullable=False),
            sa.Column(payload, sa.Text(), nullable=False),
            _created_at(),
            sa.UniqueConstraint("dog_id", "date", name=constraint),
        )

    op.create_table(
        "cosmetic_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("unlock_level", sa.Integer(), nullable=False),
        sa.Column("item_type", sa.String(30), nullable=False),
        sa.Column("icon", sa.String(20), nullable=False),
        sa.Column("ai_prompt", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_cosmetic_items_unlock_level", "cosmetic_items", ["unlock_level"])

    op.create_table(
        "equipped_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "dog_id", sa.Integer(),
            sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column(
            "item_id", sa.Integer(),
            sa.ForeignKey("cosmetic_items.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("generated_image_url", sa.String(500), nullable=False),
        _created_at("equipped_at"),
    )

    op.create_table(
        "newly_unlocked_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("dog_id", sa.Integer(), sa.ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "item_id", sa.Integer(),
            sa.ForeignKey("cosmetic_items.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at("unlocked_at"),
    )
    op.create_index("ix_newly_unlocked_dog_item", "newly_unlocked_items", ["dog_id", "item_id"])

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column(
            "referred_by_id", sa.Integer(),
            sa.ForeignKey("waitlist_entries.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("referral_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("early_access", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_waitlist_referral_code", "waitlist_entries", ["referral_code"])
    op.create_index("ix_waitlist_created_at", "waitlist_entries", ["created_at"])

    op.create_table(
        "updates_subscribers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("source", sa.String(100), nullable=True),
        _created_at("subscribed_at"),
    )
    op.create_index(
        "ix_updates_subscribers_subscribed_at", "updates_subscribers", ["subscribed_at"]
    )


def downgrade() -> None:
    """Drop every Corgi Quest table, children first."""
    for table in (
        "updates_subscribers",
        "waitlist_entries",
        "newly_unlocked_items",
        "equipped_items",
        "cosmetic_items",
        "training_tips",
        "ai_recommendations",
        "mood_logs",
        "presence",
        "streaks",
        "daily_goals",
        "activity_stat_gains",
        "activities",
        "dog_stats",
        "dogs",
        "users",
        "households",
    ):
        op.drop_table(table)
