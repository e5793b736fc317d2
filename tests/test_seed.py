"""
tests/test_seed.py — Catalogue & Demo Data Seeding Tests
=========================================================
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from corgiquest.database.models import (
    Activity,
    CosmeticItem,
    Dog,
    DogStat,
    EquippedItem,
)
from corgiquest.database.seed import COSMETIC_ITEMS, seed_cosmetic_items, seed_demo_data


class TestSeedCosmeticItems:
    def test_idempotent(self, db_engine):
        seed_cosmetic_items(db_engine)
        seed_cosmetic_items(db_engine)
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(CosmeticItem)) == len(COSMETIC_ITEMS)

    def test_unlock_levels(self):
        assert [i["unlock_level"] for i in COSMETIC_ITEMS] == [2, 5, 8, 11, 14, 17]


class TestSeedDemoData:
    def test_creates_bumi(self, db_engine):
        result = seed_demo_data(db_engine)

        assert result["success"] is True
        assert result["activity_count"] == 4
        assert result["cosmetic_items_count"] == 6
        assert set(result["user_ids"]) == {"thomas", "holly", "guest"}

        with Session(db_engine) as session:
            dog = session.get(Dog, result["dog_id"])
            assert (dog.name, dog.overall_level, dog.overall_xp) == ("Bumi", 8, 50)
            stats = {
                s.stat_type: (s.level, s.xp)
                for s in session.scalars(select(DogStat).where(DogStat.dog_id == dog.id))
            }
            assert stats == {"INT": (7, 30), "PHY": (9, 75), "IMP": (5, 20), "SOC": (6, 60)}
            assert session.scalar(select(func.count()).select_from(Activity)) == 4

            equipped = session.scalar(select(EquippedItem).where(EquippedItem.dog_id == dog.id))
            assert equipped.item.name == "Forest Cape"
            assert equipped.generated_image_url == "/images/bumi-forest-cape.png"

    def test_second_call_reuses_catalogue(self, db_engine):
        seed_demo_data(db_engine)
        second = seed_demo_data(db_engine)
        assert second["cosmetic_items_count"] == 6
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(CosmeticItem)) == 6
            assert session.scalar(select(func.count()).select_from(Dog)) == 2
