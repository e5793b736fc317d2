"""
corgiquest.database.seed — Cosmetic Catalogue & Demo Household
===============================================================

``seed_cosmetic_items`` runs on every startup and only inserts items whose
name is missing.  ``seed_demo_data`` builds a complete demo household
(invoked from the admin API or ``python -m corgiquest.worker --seed``).
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from corgiquest.constants import MENTAL_GOAL, PHYSICAL_GOAL, today_utc, utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import (
    Activity,
    ActivityStatGain,
    CosmeticItem,
    DailyGoal,
    Dog,
    DogStat,
    EquippedItem,
    Household,
    StatType,
    Streak,
    User,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cosmetic catalogue: one item every three levels starting at level 2
# ---------------------------------------------------------------------------
COSMETIC_ITEMS: list[dict[str, object]] = [
    {
        "name": "Flame Bandana",
        "description": "A fiery red bandana that radiates warmth and energy",
        "unlock_level": 2,
        "item_type": "fire",
        "icon": "\U0001f525",  # 🔥
        "ai_prompt": "fire warrior corgi wearing a red bandana with flames, "
                     "epic fantasy art, centered composition, clean background",
    },
    {
        "name": "Ocean Collar",
        "description": "A cool blue collar adorned with wave patterns",
        "unlock_level": 5,
        "item_type": "water",
        "icon": "\U0001f4a7",  # 💧
        "ai_prompt": "water mage corgi wearing a blue collar with wave patterns, "
                     "flowing water magic, mystical art, centered composition, "
                     "clean background",
    },
    {
        "name": "Forest Cape",
        "description": "A leafy green cape that brings nature's vitality",
        "unlock_level": 8,
        "item_type": "grass",
        "icon": "\U0001f33f",  # 🌿
        "ai_prompt": "nature guardian corgi wearing a leafy green cape, surrounded "
                     "by plants and vines, nature art, centered composition, "
                     "clean background",
    },
    {
        "name": "Solar Crown",
        "description": "A radiant golden crown that shines like the sun",
        "unlock_level": 11,
        "item_type": "sun",
        "icon": "☀️",  # ☀️
        "ai_prompt": "solar knight corgi wearing a radiant golden crown, glowing "
                     "with sunlight, divine art, centered composition, clean background",
    },
    {
        "name": "Lunar Scarf",
        "description": "A mystical silver scarf that glows with moonlight",
        "unlock_level": 14,
        "item_type": "moon",
        "icon": "\U0001f319",  # 🌙
        "ai_prompt": "lunar mystic corgi wearing a silver scarf glowing with "
                     "moonlight, celestial art, centered composition, clean background",
    },
    {
        "name": "Earth Vest",
        "description": "A sturdy brown vest made from the finest earth materials",
        "unlock_level": 17,
        "item_type": "ground",
        "icon": "\U0001faa8",  # 🪨
        "ai_prompt": "earth guardian corgi wearing a brown stone armor vest, rocky "
                     "terrain, nature art, centered composition, clean background",
    },
]


def _seed_items(session: Session) -> dict[str, CosmeticItem]:
    existing = {item.name: item for item in session.scalars(select(CosmeticItem))}
    inserted = 0
    for data in COSMETIC_ITEMS:
        if data["name"] in existing:
            continue
        item = CosmeticItem(**data)
        session.add(item)
        existing[item.name] = item
        inserted += 1
    session.flush()
    if inserted:
        logger.info("Seeded %d cosmetic items.", inserted)
    return existing


def seed_cosmetic_items(engine: Engine) -> None:
    """Insert catalogue items that don't yet exist (idempotent)."""
    with get_session(engine) as session:
        _seed_items(session)


# ---------------------------------------------------------------------------
# Demo household
# ---------------------------------------------------------------------------
def seed_demo_data(engine: Engine) -> dict:
    """Create a demo household with a level-8 dog named Bumi.

    Not idempotent: each call creates a new household.
    """
    now = utcnow()
    today = today_utc()

    with get_session(engine) as session:
        items = _seed_items(session)

        household = Household()
        session.add(household)
        session.flush()

        dog = Dog(
            name="Bumi",
            household_id=household.id,
            overall_level=8,
            overall_xp=50,
        )
        thomas = User(
            name="Thomas", email="thomas@example.com", household_id=household.id,
            title="Primary Trainer", avatar_url="\U0001f468",
        )
        holly = User(
            name="Holly", email="holly@example.com", household_id=household.id,
            title="Play Partner", avatar_url="\U0001f469",
        )
        guest = User(
            name="Guest", email="guest@example.com", household_id=household.id,
            title="Training Buddy", avatar_url="\U0001f9d1",
        )
        session.add_all([dog, thomas, holly, guest])
        session.flush()

        for stat_type, level, xp in (
            (StatType.INT, 7, 30),
            (StatType.PHY, 9, 75),
            (StatType.IMP, 5, 20),
            (StatType.SOC, 6, 60),
        ):
            session.add(DogStat(dog_id=dog.id, stat_type=stat_type.value, level=level, xp=xp))

        session.add(DailyGoal(
            dog_id=dog.id, day=today,
            physical_points=35, physical_goal=PHYSICAL_GOAL,
            mental_points=20, mental_goal=MENTAL_GOAL,
        ))
        session.add(Streak(
            dog_id=dog.id, current_streak=15, longest_streak=22,
            last_activity_date=today,
        ))

        samples = [
            (thomas, "Morning Walk", "30 minute walk around the neighborhood",
             30, 30, 0, [(StatType.PHY, 45)], timedelta(hours=3)),
            (holly, "Training Session", "Practiced sit, stay, and come commands",
             None, 0, 15, [(StatType.IMP, 24), (StatType.INT, 16)], timedelta(hours=2)),
            (thomas, "Fetch", "15 minutes of fetch in the backyard",
             15, 18, 5, [(StatType.PHY, 21), (StatType.IMP, 9)], timedelta(hours=1)),
            (holly, "Puzzle Toy", "Worked on treat puzzle for mental stimulation",
             None, 0, 10, [(StatType.INT, 30)], timedelta(minutes=30)),
        ]
        for user, name, desc, minutes, phy, men, gains, ago in samples:
            activity = Activity(
                dog_id=dog.id, user_id=user.id, activity_name=name,
                description=desc, duration_minutes=minutes,
                physical_points=phy, mental_points=men, created_at=now - ago,
            )
            activity.stat_gains = [
                ActivityStatGain(stat_type=st.value, xp_amount=amount) for st, amount in gains
            ]
            session.add(activity)

        forest_cape = items["Forest Cape"]
        session.add(EquippedItem(
            dog_id=dog.id,
            item_id=forest_cape.id,
            generated_image_url="/images/bumi-forest-cape.png",
        ))
        session.flush()

        logger.info("Seeded demo household %d with dog %d.", household.id, dog.id)
        return {
            "success": True,
            "household_id": household.id,
            "dog_id": dog.id,
            "user_ids": {"thomas": thomas.id, "holly": holly.id, "guest": guest.id},
            "activity_count": len(samples),
            "cosmetic_items_count": len(items),
            "equipped_item_id": forest_cape.id,
        }
