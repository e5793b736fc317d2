"""
corgiquest.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for **non-secret** settings (scheduler trigger,
model name, payment mode, upstream URLs).  Secrets (database URL, API
keys, JWT secret) come from the environment / ``.env``.

Usage::

    from corgiquest.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.daily_reset_hour)  # 0
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

PAYMENT_MODES = ("sandbox", "live")


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CorgiQuestConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Gameplay constants (XP per level, daily goals) are not configurable;
    they live in :mod:`corgiquest.constants`.
    """

    # Identity
    app_name: str = "Corgi Quest"

    # Scheduler: wall-clock trigger for the daily reset (UTC)
    daily_reset_hour: int = 0
    daily_reset_minute: int = 0

    # Recommendations
    recommendation_model: str = "gpt-4o-mini"

    # Payments
    payment_mode: str = "sandbox"
    payment_api_url: str = "https://api.useautumn.com/v1/checkout"

    # Training tips
    tips_api_url: str = "https://api.firecrawl.dev/v1/scrape"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> CorgiQuestConfig:
    """Read *path* and return a :class:`CorgiQuestConfig` instance.

    A missing file yields the defaults so tests and one-off scripts do not
    need a config on disk.

    Raises
    ------
    ValueError
        If a value is out of range (hour/minute, unknown payment mode).
    """
    config_path = Path(path)
    raw: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    defaults = CorgiQuestConfig()
    cfg = CorgiQuestConfig(
        app_name=raw.get("app_name", defaults.app_name),
        daily_reset_hour=int(raw.get("daily_reset_hour", defaults.daily_reset_hour)),
        daily_reset_minute=int(raw.get("daily_reset_minute", defaults.daily_reset_minute)),
        recommendation_model=raw.get("recommendation_model", defaults.recommendation_model),
        payment_mode=raw.get("payment_mode", defaults.payment_mode),
        payment_api_url=raw.get("payment_api_url", defaults.payment_api_url),
        tips_api_url=raw.get("tips_api_url", defaults.tips_api_url),
    )

    if not 0 <= cfg.daily_reset_hour <= 23:
        raise ValueError(f"daily_reset_hour out of range: {cfg.daily_reset_hour}")
    if not 0 <= cfg.daily_reset_minute <= 59:
        raise ValueError(f"daily_reset_minute out of range: {cfg.daily_reset_minute}")
    if cfg.payment_mode not in PAYMENT_MODES:
        raise ValueError(
            f"payment_mode must be one of {PAYMENT_MODES}, got {cfg.payment_mode!r}"
        )
    return cfg
