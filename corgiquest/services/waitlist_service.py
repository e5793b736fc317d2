"""
corgiquest.services.waitlist_service — Waitlist, Referrals & Update Emails
==========================================================================

Waitlist signups get a random referral code and a queue position.  A
signup carrying someone else's code grants early access to both people
(single hop: the referrer's own referrer gets nothing).

Update-email subscriptions are a separate, simpler list.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from corgiquest.constants import (
    EMAIL_REGEX,
    REFERRAL_CODE_ALPHABET,
    REFERRAL_CODE_LENGTH,
    as_utc,
    utcnow,
)
from corgiquest.database.engine import get_session
from corgiquest.database.models import UpdatesSubscriber, WaitlistEntry
from corgiquest.errors import InvalidEmailError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# Referral count at which a referrer earns early access
EARLY_ACCESS_REFERRALS = 1


def normalize_email(email: str) -> str:
    """Trim and lowercase *email*, raising :class:`InvalidEmailError` if malformed."""
    normalized = email.strip().lower()
    if not EMAIL_REGEX.match(normalized):
        raise InvalidEmailError(email)
    return normalized


def generate_referral_code() -> str:
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))


def queue_position(session: Session, created_at: datetime) -> int:
    """1 + number of signups strictly earlier than *created_at*."""
    ahead = session.scalar(
        select(func.count()).select_from(WaitlistEntry).where(
            WaitlistEntry.created_at < created_at
        )
    )
    return (ahead or 0) + 1


def _entry_dict(entry: WaitlistEntry, position: int) -> dict[str, Any]:
    return {
        "id": entry.id,
        "email": entry.email,
        "referral_code": entry.referral_code,
        "referral_count": entry.referral_count,
        "position": position,
        "early_access": entry.early_access,
    }


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------
def join_waitlist(
    engine: Engine,
    email: str,
    referred_by_code: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Sign *email* up, or return the existing signup unchanged.

    Re-signing with a registered email never touches the referrer, so a
    repeat submit cannot inflate anyone's referral count.
    """
    normalized = normalize_email(email)

    with get_session(engine) as session:
        existing = session.scalar(
            select(WaitlistEntry).where(WaitlistEntry.email == normalized)
        )
        if existing is not None:
            return _entry_dict(existing, queue_position(session, existing.created_at))

        referrer = None
        if referred_by_code:
            referrer = session.scalar(
                select(WaitlistEntry)
                .where(WaitlistEntry.referral_code == referred_by_code)
                .order_by(WaitlistEntry.created_at)
                .limit(1)
            )
            if referrer is None:
                logger.info("Unknown referral code %r; signing up without referrer.", referred_by_code)
            else:
                referrer.referral_count += 1
                if referrer.referral_count >= EARLY_ACCESS_REFERRALS:
                    referrer.early_access = True

        entry = WaitlistEntry(
            email=normalized,
            referral_code=generate_referral_code(),
            referred_by_id=referrer.id if referrer else None,
            referral_count=0,
            early_access=referrer is not None,
            created_at=now or utcnow(),
        )
        session.add(entry)
        session.flush()

        result = _entry_dict(entry, queue_position(session, entry.created_at))

    logger.info("Waitlist signup #%d (referred=%s).", result["position"], referrer is not None)
    return result


# ---------------------------------------------------------------------------
# Update emails
# ---------------------------------------------------------------------------
def subscribe_to_updates(
    engine: Engine, email: str, source: str | None = None, now: datetime | None = None
) -> dict[str, Any]:
    normalized = normalize_email(email)

    with get_session(engine) as session:
        existing = session.scalar(
            select(UpdatesSubscriber).where(UpdatesSubscriber.email == normalized)
        )
        if existing is not None:
            return {
                "email": existing.email,
                "subscribed_at": as_utc(existing.subscribed_at).isoformat(),
                "is_new": False,
            }

        subscriber = UpdatesSubscriber(
            email=normalized, source=source, subscribed_at=now or utcnow()
        )
        session.add(subscriber)
        session.flush()
        subscribed_at = as_utc(subscriber.subscribed_at)

    logger.info("New updates subscriber (source=%s).", source)
    return {"email": normalized, "subscribed_at": subscribed_at.isoformat(), "is_new": True}


def get_subscriber_count(engine: Engine, now: datetime | None = None) -> dict[str, int]:
    week_ago = (now or utcnow()) - timedelta(days=7)
    with get_session(engine) as session:
        total = session.scalar(select(func.count()).select_from(UpdatesSubscriber)) or 0
        last_week = session.scalar(
            select(func.count()).select_from(UpdatesSubscriber).where(
                UpdatesSubscriber.subscribed_at > week_ago
            )
        ) or 0
    return {"total": total, "last_week": last_week}


def list_subscribers(engine: Engine) -> list[dict[str, Any]]:
    """All subscribers, newest first.  Admin only."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(UpdatesSubscriber).order_by(UpdatesSubscriber.subscribed_at.desc())
        ).all()
        return [
            {
                "id": s.id,
                "email": s.email,
                "source": s.source,
                "subscribed_at": as_utc(s.subscribed_at).isoformat(),
            }
            for s in rows
        ]
