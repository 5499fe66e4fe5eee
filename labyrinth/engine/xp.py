"""
labyrinth.engine.xp — XP Calculation
=====================================

Pure function of (difficulty, time_ms, deaths, completed).  No database
or clock access.

Formula, in integer arithmetic::

    completion_bonus = base                      if completed
    time_bonus       = base * (120 - secs) // 120 if completed and secs < 120
    death_multiplier = 100 - min(deaths * 10, 50)
    raw              = (base + completion_bonus + time_bonus) * death_multiplier // 100
    xp               = max(10, raw)
"""

from __future__ import annotations

from dataclasses import dataclass

from labyrinth.constants import (
    DEATH_PENALTY_PER_DEATH,
    MAX_DEATH_PENALTY,
    MIN_RUN_XP,
    TIME_BONUS_WINDOW_SECS,
)
from labyrinth.database.models import Difficulty

__all__ = ["BASE_XP", "XpBreakdown", "calculate_xp", "xp_breakdown"]

BASE_XP: dict[Difficulty, int] = {
    Difficulty.EASY: 75,
    Difficulty.MEDIUM: 100,
    Difficulty.HARD: 125,
    Difficulty.NIGHTMARE: 150,
}


@dataclass(frozen=True, slots=True)
class XpBreakdown:
    """Every intermediate term of the formula, for UI confirmation."""

    base: int
    completion_bonus: int
    time_bonus: int
    death_penalty_pct: int
    raw: int
    total: int


def xp_breakdown(
    difficulty: Difficulty | str,
    time_ms: int,
    deaths: int,
    completed: bool,
) -> XpBreakdown:
    base = BASE_XP[Difficulty(difficulty)]

    completion_bonus = base if completed else 0

    time_secs = time_ms // 1000
    if completed and time_secs < TIME_BONUS_WINDOW_SECS:
        time_bonus = base * (TIME_BONUS_WINDOW_SECS - time_secs) // TIME_BONUS_WINDOW_SECS
    else:
        time_bonus = 0

    death_penalty = min(deaths * DEATH_PENALTY_PER_DEATH, MAX_DEATH_PENALTY)
    death_multiplier = 100 - death_penalty

    raw = (base + completion_bonus + time_bonus) * death_multiplier // 100
    return XpBreakdown(
        base=base,
        completion_bonus=completion_bonus,
        time_bonus=time_bonus,
        death_penalty_pct=death_penalty,
        raw=raw,
        total=max(MIN_RUN_XP, raw),
    )


def calculate_xp(
    difficulty: Difficulty | str,
    time_ms: int,
    deaths: int,
    completed: bool,
) -> int:
    """XP earned by one run.  Never below ``MIN_RUN_XP``."""
    return xp_breakdown(difficulty, time_ms, deaths, completed).total
