"""
labyrinth.engine.leaderboard — Bounded Ranked Leaderboard
==========================================================

Pure list manipulation; persistence lives in
:class:`~labyrinth.services.store.Store`.

Update procedure for a player snapshot:

1. Find the player's entry.  Absent → append.  Present → overwrite score
   and totals, adopting ``best_time_ms`` only when it is strictly lower.
2. Stable-sort by ``best_time_ms`` ascending (earlier acceptance wins ties).
3. Truncate to ``size``.
4. Rewrite ``rank`` as the 1-based position.
5. Report the player's rank, or 0 when they fell below the cut.

Players without a completed run (``best_time_ms is None``) are never
listed; their rank is 0.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from labyrinth.constants import LEADERBOARD_SIZE

__all__ = ["Standing", "rerank", "update_leaderboard"]


@dataclass(slots=True)
class Standing:
    wallet: str
    username: str
    best_time_ms: int | None
    best_score: int = 0
    total_runs: int = 0
    total_xp: int = 0
    rank: int = 0


def rerank(entries: list[Standing]) -> list[Standing]:
    """Stable-sort by best time and rewrite ranks in place."""
    entries.sort(key=lambda e: e.best_time_ms)
    for position, entry in enumerate(entries, start=1):
        entry.rank = position
    return entries


def update_leaderboard(
    entries: list[Standing],
    snapshot: Standing,
    size: int = LEADERBOARD_SIZE,
) -> tuple[list[Standing], int]:
    """Apply *snapshot* to a copy of *entries*.

    *entries* must already be in rank order; that order is what the stable
    sort preserves for equal times.

    Returns ``(new_entries, rank)``.
    """
    board = [replace(e) for e in entries]
    current = next((e for e in board if e.wallet == snapshot.wallet), None)

    if current is None:
        if snapshot.best_time_ms is None:
            return board, 0
        board.append(replace(snapshot, rank=0))
    else:
        current.username = snapshot.username
        current.best_score = snapshot.best_score
        current.total_runs = snapshot.total_runs
        current.total_xp = snapshot.total_xp
        if snapshot.best_time_ms is not None and snapshot.best_time_ms < current.best_time_ms:
            current.best_time_ms = snapshot.best_time_ms

    rerank(board)
    del board[size:]

    rank = next((e.rank for e in board if e.wallet == snapshot.wallet), 0)
    return board, rank
