"""
corgiquest.constants — Shared Constants & Helpers
==================================================

Single source of truth for the leveling threshold, daily goal targets and
the calendar-day helpers every service keys its rows by.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta

# ---------------------------------------------------------------------------
# Leveling: flat curve, every level costs the same
# ---------------------------------------------------------------------------
XP_PER_LEVEL = 100

# ---------------------------------------------------------------------------
# Daily stimulation goals
# ---------------------------------------------------------------------------
PHYSICAL_GOAL = 50
MENTAL_GOAL = 30

# Pseudo stat type used for aggregate (dog-level) level-up events
OVERALL = "OVERALL"

# ---------------------------------------------------------------------------
# Presence / feeds
# ---------------------------------------------------------------------------
PRESENCE_STALE_SECONDS = 30
FEED_LIMIT = 20

# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REFERRAL_CODE_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
REFERRAL_CODE_LENGTH = 6


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------
def utcnow() -> datetime:
    return datetime.now(UTC)


def today_utc() -> date:
    """Calendar day of the server clock.  Rows are keyed by this."""
    return utcnow().date()


def yesterday_of(day: date) -> date:
    return day - timedelta(days=1)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the ``[start, end)`` UTC datetimes covering *day*."""
    start = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return start, start + timedelta(days=1)
