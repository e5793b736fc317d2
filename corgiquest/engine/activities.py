"""
corgiquest.engine.activities — Activity XP & Daily-Point Tables
================================================================

Two families of activities:

- **Duration** activities award XP and stimulation points per 10 minutes.
- **Fixed** activities award a flat amount regardless of time spent.

Each activity splits its XP across stats by percentage.  Everything here
is pure; the activity logger receives the computed ``stat_gains`` and
points as plain inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from corgiquest.database.models import StatType


@dataclass(frozen=True)
class ActivityDefinition:
    base_xp: int
    distribution: dict[StatType, int]  # percentages, summing to 100
    physical_points: int = 0
    mental_points: int = 0


@dataclass(frozen=True)
class StatGain:
    stat_type: str
    xp_amount: int


@dataclass
class ActivityResult:
    """Everything :func:`~corgiquest.services.activity_service.log_activity` needs."""

    activity_name: str
    total_xp: int
    stat_gains: list[StatGain] = field(default_factory=list)
    physical_points: int = 0
    mental_points: int = 0
    duration_minutes: int | None = None


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------
# Per 10 minutes
DURATION_ACTIVITIES: dict[str, ActivityDefinition] = {
    "Walk": ActivityDefinition(15, {StatType.PHY: 100}, 10, 0),
    "Run/Jog": ActivityDefinition(25, {StatType.PHY: 100}, 15, 0),
    "Fetch": ActivityDefinition(20, {StatType.PHY: 70, StatType.IMP: 30}, 12, 3),
    "Tug-of-War": ActivityDefinition(18, {StatType.PHY: 60, StatType.IMP: 40}, 10, 5),
    "Swimming": ActivityDefinition(30, {StatType.PHY: 100}, 20, 0),
}

FIXED_ACTIVITIES: dict[str, ActivityDefinition] = {
    "Training Session": ActivityDefinition(40, {StatType.IMP: 60, StatType.INT: 40}, 0, 15),
    "Puzzle Toy": ActivityDefinition(30, {StatType.INT: 100}, 0, 10),
    "Playdate": ActivityDefinition(35, {StatType.SOC: 70, StatType.PHY: 30}, 8, 7),
    "Grooming": ActivityDefinition(20, {StatType.IMP: 50, StatType.SOC: 50}, 0, 8),
    "Trick Practice": ActivityDefinition(25, {StatType.INT: 60, StatType.IMP: 40}, 0, 10),
    "Sniff Walk": ActivityDefinition(20, {StatType.INT: 60, StatType.PHY: 40}, 5, 8),
    "Dog Park Visit": ActivityDefinition(40, {StatType.SOC: 50, StatType.PHY: 50}, 12, 8),
}


def is_duration_activity(name: str) -> bool:
    return name in DURATION_ACTIVITIES


def _lookup(name: str) -> ActivityDefinition:
    definition = DURATION_ACTIVITIES.get(name) or FIXED_ACTIVITIES.get(name)
    if definition is None:
        raise ValueError(f"Unknown activity: {name}")
    return definition


# ---------------------------------------------------------------------------
# Calculations
# ---------------------------------------------------------------------------
def calculate_activity_xp(name: str, duration_minutes: int) -> int:
    """XP for a duration activity: ``round(minutes / 10 * base_xp)``."""
    definition = DURATION_ACTIVITIES.get(name)
    if definition is None:
        raise ValueError(f"Unknown duration activity: {name}")
    return round(duration_minutes / 10 * definition.base_xp)


def distribute_stat_xp(total_xp: int, distribution: dict[StatType, int]) -> list[StatGain]:
    """Split *total_xp* by percentage; zero shares are dropped."""
    gains: list[StatGain] = []
    for stat_type, percentage in distribution.items():
        amount = round(total_xp * percentage / 100)
        if amount > 0:
            gains.append(StatGain(stat_type=str(stat_type), xp_amount=amount))
    return gains


def calculate_daily_points(name: str, duration_minutes: int | None = None) -> tuple[int, int]:
    """Return ``(physical_points, mental_points)``.  Unknown names give zeros."""
    if is_duration_activity(name):
        if duration_minutes is None:
            raise ValueError(f"{name} requires a duration")
        definition = DURATION_ACTIVITIES[name]
        factor = duration_minutes / 10
        return (
            round(definition.physical_points * factor),
            round(definition.mental_points * factor),
        )
    definition = FIXED_ACTIVITIES.get(name)
    if definition is None:
        return 0, 0
    return definition.physical_points, definition.mental_points


def calculate_activity_result(name: str, duration_minutes: int | None = None) -> ActivityResult:
    definition = _lookup(name)
    if is_duration_activity(name):
        if duration_minutes is None:
            raise ValueError(f"{name} requires a duration")
        total_xp = calculate_activity_xp(name, duration_minutes)
    else:
        total_xp = definition.base_xp

    physical, mental = calculate_daily_points(name, duration_minutes)
    return ActivityResult(
        activity_name=name,
        total_xp=total_xp,
        stat_gains=distribute_stat_xp(total_xp, definition.distribution),
        physical_points=physical,
        mental_points=mental,
        duration_minutes=duration_minutes,
    )
