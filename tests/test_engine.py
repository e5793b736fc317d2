"""
tests/test_engine.py — Engine & Session Helper Tests
=====================================================
"""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import func, select

from corgiquest.database.engine import create_db_engine, get_session, init_db, run_db
from corgiquest.database.models import CosmeticItem, Household


class TestCreateDbEngine:
    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(RuntimeError, match="DATABASE_URL is not set"):
            create_db_engine()

    def test_sqlite_url_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cq.db'}")
        engine = create_db_engine()
        assert engine.dialect.name == "sqlite"

    def test_init_db_seeds_catalogue(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'cq.db'}")
        init_db(engine)
        init_db(engine)
        with get_session(engine) as session:
            assert session.scalar(select(func.count()).select_from(CosmeticItem)) == 6


class TestGetSession:
    def test_commits_on_exit(self, db_engine):
        with get_session(db_engine) as session:
            session.add(Household())
        with get_session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Household)) == 1

    def test_rolls_back_on_error(self, db_engine):
        with pytest.raises(RuntimeError):
            with get_session(db_engine) as session:
                session.add(Household())
                session.flush()
                raise RuntimeError("boom")
        with get_session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(Household)) == 0


class TestRunDb:
    def test_forwards_args(self):
        def add(a, b, *, c=0):
            return a + b + c

        assert asyncio.run(run_db(add, 1, 2, c=3)) == 6
