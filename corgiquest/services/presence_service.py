"""
corgiquest.services.presence_service — Household Presence
==========================================================

Each user heartbeats the screen they are on.  A partner whose last
heartbeat is older than :data:`PRESENCE_STALE_SECONDS` reports an empty
location.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select

from corgiquest.constants import PRESENCE_STALE_SECONDS, as_utc, utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import Presence, User

if TYPE_CHECKING:
    from sqlalchemy import Engine


def update_presence(
    engine: Engine, user_id: int, location: str, now: datetime | None = None
) -> dict[str, Any]:
    now = now or utcnow()
    with get_session(engine) as session:
        presence = session.scalar(select(Presence).where(Presence.user_id == user_id))
        if presence is None:
            session.add(Presence(user_id=user_id, location=location, last_seen=now))
        else:
            presence.location = location
            presence.last_seen = now
    return {"success": True}


def clear_presence(engine: Engine, user_id: int) -> dict[str, Any]:
    with get_session(engine) as session:
        session.execute(delete(Presence).where(Presence.user_id == user_id))
    return {"success": True}


def get_partner_presence(
    engine: Engine, household_id: int, current_user_id: int, now: datetime | None = None
) -> dict[str, Any] | None:
    """Presence of the first other user in the household, or None if alone."""
    now = now or utcnow()
    with get_session(engine) as session:
        partner = session.scalar(
            select(User)
            .where(User.household_id == household_id, User.id != current_user_id)
            .order_by(User.id)
            .limit(1)
        )
        if partner is None:
            return None

        presence = session.scalar(select(Presence).where(Presence.user_id == partner.id))
        if presence is None:
            return {"partner_name": partner.name, "location": "", "last_seen": None}

        last_seen = as_utc(presence.last_seen)
        stale = now - last_seen > timedelta(seconds=PRESENCE_STALE_SECONDS)
        return {
            "partner_name": partner.name,
            "location": "" if stale else presence.location,
            "last_seen": last_seen.isoformat(),
        }
