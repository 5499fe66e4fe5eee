"""
labyrinth.engine.prizes — Prize Pool Split
===========================================

The top five ranks of a frozen leaderboard receive fixed percentages of the
pool, rounded down.  Whatever is left (rounding, or fewer than five ranked
players) stays undistributed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from labyrinth.constants import PRIZE_SPLIT
from labyrinth.engine.leaderboard import Standing

__all__ = ["PrizeShare", "compute_prize_shares", "undistributed_remainder"]


@dataclass(frozen=True, slots=True)
class PrizeShare:
    wallet: str
    rank: int
    xp_amount: int


def compute_prize_shares(
    leaderboard: Sequence[Standing],
    pool: int,
    split: Sequence[int] = PRIZE_SPLIT,
) -> list[PrizeShare]:
    """One share per ranked entry, in rank order, for the first ``len(split)``."""
    ranked = sorted(leaderboard, key=lambda e: e.rank)
    return [
        PrizeShare(wallet=entry.wallet, rank=entry.rank, xp_amount=pool * pct // 100)
        for entry, pct in zip(ranked, split)
    ]


def undistributed_remainder(shares: Sequence[PrizeShare], pool: int) -> int:
    return pool - sum(s.xp_amount for s in shares)
