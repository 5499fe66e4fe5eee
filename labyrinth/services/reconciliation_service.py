"""
labyrinth.services.reconciliation_service — Aggregate Drift Detection
======================================================================

Recomputes every denormalised counter from the rows it summarises and
reports mismatches.  Nothing is corrected automatically; the journal of
GameRun and TournamentReward rows is authoritative.

Checks:
    1. ``tournaments.participant_count`` vs. TournamentPlayer rows
    2. ``tournaments.total_runs`` vs. GameRun rows
    3. TournamentPlayer run count and XP vs. its GameRun rows
    4. ``players.total_runs`` vs. GameRun rows, and ``players.total_xp``
       vs. run XP plus prize XP
    5. Leaderboard ranks are dense ``1..N``, ordered by best time, within
       the size bound, and agree with TournamentPlayer best times
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from labyrinth.constants import LEADERBOARD_SIZE
from labyrinth.database.models import (
    GameRun,
    LeaderboardEntry,
    Player,
    Tournament,
    TournamentPlayer,
    TournamentReward,
)

logger = logging.getLogger(__name__)


def _drift(kind: str, key, stored, actual) -> dict:
    logger.warning("Drift in %s for %s: stored=%s actual=%s", kind, key, stored, actual)
    return {"kind": kind, "key": key, "stored": stored, "actual": actual}


def find_drift(session: Session) -> list[dict]:
    """Return one ``{"kind", "key", "stored", "actual"}`` dict per mismatch."""
    drift: list[dict] = []

    # Ground truth from the journal
    runs_by_tournament = dict(session.execute(
        select(GameRun.tournament_id, func.count()).group_by(GameRun.tournament_id)
    ).all())
    runs_by_tp = {
        (row.tournament_id, row.wallet): (row.runs, row.xp)
        for row in session.execute(
            select(
                GameRun.tournament_id,
                GameRun.wallet,
                func.count().label("runs"),
                func.coalesce(func.sum(GameRun.xp_earned), 0).label("xp"),
            ).group_by(GameRun.tournament_id, GameRun.wallet)
        ).all()
    }
    runs_by_player = {
        row.wallet: (row.runs, row.xp)
        for row in session.execute(
            select(
                GameRun.wallet,
                func.count().label("runs"),
                func.coalesce(func.sum(GameRun.xp_earned), 0).label("xp"),
            ).group_by(GameRun.wallet)
        ).all()
    }
    prizes_by_player = dict(session.execute(
        select(TournamentReward.wallet, func.sum(TournamentReward.xp_amount))
        .group_by(TournamentReward.wallet)
    ).all())
    participants = dict(session.execute(
        select(TournamentPlayer.tournament_id, func.count())
        .group_by(TournamentPlayer.tournament_id)
    ).all())

    # 1-2. Tournament counters
    for tournament in session.scalars(select(Tournament).order_by(Tournament.id)).all():
        actual = participants.get(tournament.id, 0)
        if tournament.participant_count != actual:
            drift.append(_drift("participant_count", tournament.id,
                                tournament.participant_count, actual))
        actual = runs_by_tournament.get(tournament.id, 0)
        if tournament.total_runs != actual:
            drift.append(_drift("tournament_total_runs", tournament.id,
                                tournament.total_runs, actual))

    # 3. Per-tournament aggregates
    tp_best: dict[tuple[int, str], int | None] = {}
    for tp in session.scalars(select(TournamentPlayer)).all():
        key = (tp.tournament_id, tp.wallet)
        tp_best[key] = tp.best_time_ms
        runs, xp = runs_by_tp.get(key, (0, 0))
        if tp.total_runs != runs:
            drift.append(_drift("tournament_player_total_runs", key, tp.total_runs, runs))
        if tp.total_xp_earned != xp:
            drift.append(_drift("tournament_player_total_xp", key, tp.total_xp_earned, xp))

    # 4. Global profiles
    for player in session.scalars(select(Player)).all():
        runs, xp = runs_by_player.get(player.wallet, (0, 0))
        xp += prizes_by_player.get(player.wallet) or 0
        if player.total_runs != runs:
            drift.append(_drift("player_total_runs", player.wallet, player.total_runs, runs))
        if player.total_xp != xp:
            drift.append(_drift("player_total_xp", player.wallet, player.total_xp, xp))

    # 5. Leaderboards
    boards: dict[int, list[LeaderboardEntry]] = {}
    for entry in session.scalars(
        select(LeaderboardEntry).order_by(LeaderboardEntry.tournament_id, LeaderboardEntry.rank)
    ).all():
        boards.setdefault(entry.tournament_id, []).append(entry)

    for tournament_id, entries in boards.items():
        ranks = [e.rank for e in entries]
        expected = list(range(1, len(entries) + 1))
        if ranks != expected:
            drift.append(_drift("leaderboard_ranks", tournament_id, ranks, expected))
        if len(entries) > LEADERBOARD_SIZE:
            drift.append(_drift("leaderboard_size", tournament_id, len(entries), LEADERBOARD_SIZE))
        times = [e.best_time_ms for e in entries]
        if times != sorted(times):
            drift.append(_drift("leaderboard_order", tournament_id, times, sorted(times)))
        for entry in entries:
            key = (tournament_id, entry.wallet)
            if tp_best.get(key) != entry.best_time_ms:
                drift.append(_drift("leaderboard_best_time", key,
                                    entry.best_time_ms, tp_best.get(key)))

    if not drift:
        logger.info("Reconciliation: no drift found")
    return drift
