"""
tests/test_waitlist.py — Waitlist, Referral & Subscriber Tests
===============================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from corgiquest.database.models import UpdatesSubscriber, WaitlistEntry
from corgiquest.errors import InvalidEmailError
from corgiquest.services.waitlist_service import (
    generate_referral_code,
    get_subscriber_count,
    join_waitlist,
    list_subscribers,
    subscribe_to_updates,
)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


def _at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


class TestJoinWaitlist:
    def test_normalises_email(self, db_engine):
        result = join_waitlist(db_engine, "  Corgi.Fan@Example.COM ", now=_at(0))
        assert result["email"] == "corgi.fan@example.com"
        assert result["position"] == 1
        assert result["referral_count"] == 0
        assert result["early_access"] is False

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "two words@x.io", "@x.io", ""])
    def test_rejects_invalid_email(self, db_engine, email):
        with pytest.raises(InvalidEmailError, match="Invalid email format"):
            join_waitlist(db_engine, email)
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(WaitlistEntry)) == 0

    def test_positions_follow_signup_order(self, db_engine):
        positions = [
            join_waitlist(db_engine, f"user{n}@example.com", now=_at(n))["position"]
            for n in range(5)
        ]
        assert positions == [1, 2, 3, 4, 5]

    def test_resignup_is_idempotent(self, db_engine):
        first = join_waitlist(db_engine, "a@example.com", now=_at(0))
        join_waitlist(db_engine, "b@example.com", now=_at(1))
        again = join_waitlist(db_engine, "A@example.com", now=_at(2))

        assert again["id"] == first["id"]
        assert again["referral_code"] == first["referral_code"]
        assert again["position"] == 1
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(WaitlistEntry)) == 2

    def test_referral_grants_early_access_both_ways(self, db_engine):
        referrer = join_waitlist(db_engine, "ref@example.com", now=_at(0))
        referred = join_waitlist(
            db_engine, "new@example.com", referred_by_code=referrer["referral_code"], now=_at(1)
        )

        assert referred["early_access"] is True
        with Session(db_engine) as session:
            row = session.get(WaitlistEntry, referrer["id"])
            assert row.referral_count == 1
            assert row.early_access is True
            new_row = session.get(WaitlistEntry, referred["id"])
            assert new_row.referred_by_id == referrer["id"]

    def test_resignup_with_code_does_not_inflate_count(self, db_engine):
        referrer = join_waitlist(db_engine, "ref@example.com", now=_at(0))
        code = referrer["referral_code"]
        join_waitlist(db_engine, "friend@example.com", referred_by_code=code, now=_at(1))
        join_waitlist(db_engine, "friend@example.com", referred_by_code=code, now=_at(2))

        again = join_waitlist(db_engine, "ref@example.com")
        assert again["referral_count"] == 1

    def test_unknown_code_ignored(self, db_engine):
        result = join_waitlist(db_engine, "solo@example.com", referred_by_code="zzzzzz")
        assert result["early_access"] is False

    def test_referral_is_single_hop(self, db_engine):
        a = join_waitlist(db_engine, "a@example.com", now=_at(0))
        b = join_waitlist(db_engine, "b@example.com", referred_by_code=a["referral_code"], now=_at(1))
        join_waitlist(db_engine, "c@example.com", referred_by_code=b["referral_code"], now=_at(2))

        with Session(db_engine) as session:
            assert session.get(WaitlistEntry, a["id"]).referral_count == 1
            assert session.get(WaitlistEntry, b["id"]).referral_count == 1


class TestReferralCode:
    def test_shape(self):
        code = generate_referral_code()
        assert len(code) == 6
        assert code.isalnum() and code == code.lower()


class TestUpdatesSubscribers:
    def test_subscribe_is_idempotent(self, db_engine):
        first = subscribe_to_updates(db_engine, "Fan@Example.com", source="landing", now=_at(0))
        second = subscribe_to_updates(db_engine, "fan@example.com", now=_at(5))

        assert first["is_new"] is True
        assert second["is_new"] is False
        assert second["subscribed_at"] == first["subscribed_at"]
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(UpdatesSubscriber)) == 1

    def test_subscribe_rejects_invalid(self, db_engine):
        with pytest.raises(InvalidEmailError):
            subscribe_to_updates(db_engine, "nope")

    def test_counts_and_listing(self, db_engine):
        now = datetime(2025, 3, 20, tzinfo=UTC)
        subscribe_to_updates(db_engine, "old@example.com", now=now - timedelta(days=30))
        subscribe_to_updates(db_engine, "new@example.com", now=now - timedelta(days=1))

        assert get_subscriber_count(db_engine, now=now) == {"total": 2, "last_week": 1}
        emails = [s["email"] for s in list_subscribers(db_engine)]
        assert emails == ["new@example.com", "old@example.com"]
