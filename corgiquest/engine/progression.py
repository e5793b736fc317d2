"""
corgiquest.engine.progression — Level-Up Calculation
=====================================================

Pure arithmetic shared by every stat row and the dog's aggregate level.
No DB I/O.  The curve is flat: every level costs :data:`XP_PER_LEVEL`.
"""

from __future__ import annotations

from dataclasses import dataclass

from corgiquest.constants import XP_PER_LEVEL


@dataclass(frozen=True)
class LevelUpResult:
    """Outcome of applying an XP gain to a (level, xp) pair."""

    new_level: int
    new_xp: int
    xp_to_next_level: int = XP_PER_LEVEL
    leveled_up: bool = False
    levels_gained: int = 0


def calculate_level_up(current_level: int, current_xp: int, xp_gained: int) -> LevelUpResult:
    """Apply *xp_gained* and roll overflow into as many levels as it covers.

    ``(1, 95, 10)`` → level 2 with 5 XP; ``(3, 50, 260)`` → level 6 with 10 XP.
    Inputs are trusted as-is.
    """
    new_level = current_level
    new_xp = current_xp + xp_gained

    while new_xp >= XP_PER_LEVEL:
        new_level += 1
        new_xp -= XP_PER_LEVEL

    return LevelUpResult(
        new_level=new_level,
        new_xp=new_xp,
        xp_to_next_level=XP_PER_LEVEL,
        leveled_up=new_level > current_level,
        levels_gained=new_level - current_level,
    )
