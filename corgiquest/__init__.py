"""
Corgi Quest — A Dog Training RPG Backend
=========================================
Households log training activities for their dog, the dog earns XP across
four stats, daily stimulation goals roll up into streaks, and an LLM
suggests what to do next.  A waitlist with single-hop referrals gates
early access.

Package layout::

    corgiquest/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Leveling constants, goal thresholds, date helpers
    ├── errors.py          # Exception taxonomy shared by services and API
    ├── monitoring.py      # Optional Sentry wiring
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Cosmetic catalogue + demo household
    ├── engine/
    │   ├── progression.py # Level-up arithmetic (pure)
    │   ├── activities.py  # Activity XP / point tables (pure)
    │   └── prompts.py     # Recommendation prompt rendering
    ├── services/
    │   ├── activity_service.py       # log_activity / log_mood
    │   ├── daily_reset_service.py    # Midnight goal + streak job
    │   ├── recommendation_service.py # Per-day AI suggestion cache
    │   ├── waitlist_service.py       # Waitlist, referrals, update emails
    │   ├── dog_service.py            # Read-side queries
    │   ├── item_service.py           # Cosmetic unlocks + equipping
    │   ├── presence_service.py       # Partner presence
    │   ├── tips_service.py           # Training-tip scraping proxy
    │   └── payment_service.py        # Tip checkout (sandbox / live)
    ├── worker/            # ``python -m corgiquest.worker`` scheduler
    └── api/
        ├── main.py        # FastAPI app
        └── routes/        # REST endpoints
"""

__version__ = "0.1.0"
