"""
labyrinth.services.submission_service — Run Submission Pipeline
================================================================

``submit_run`` validates the caller and tournament, then in one
transaction:

1. Allocates a run id and appends the immutable GameRun
2. Computes XP from the tournament difficulty
3. Pushes the run onto the recent-runs ring
4. Loads or creates the caller's TournamentPlayer row
5. Updates per-tournament bests and totals
6. Credits the global Player profile
7. Bumps tournament counters
8. Re-ranks the leaderboard

Usernames written to runs and leaderboard rows are snapshots taken now.
"""

from __future__ import annotations

import logging

from labyrinth.config import LabyrinthConfig
from labyrinth.database.models import GameRun, TournamentPlayer
from labyrinth.engine.identity import Signer
from labyrinth.engine.leaderboard import Standing, update_leaderboard
from labyrinth.engine.operations import RunSubmitted, SubmitRun
from labyrinth.engine.xp import calculate_xp
from labyrinth.errors import MaxAttemptsReached
from labyrinth.services.registrar import resolve_wallet
from labyrinth.services.store import Store
from labyrinth.services.tournament_service import ensure_accepting, get_tournament_or_raise

logger = logging.getLogger(__name__)


def submit_run(
    store: Store,
    signer: Signer | None,
    op: SubmitRun,
    now: int,
    config: LabyrinthConfig | None = None,
) -> RunSubmitted:
    wallet = resolve_wallet(store, signer, now, config)
    tournament = get_tournament_or_raise(store, op.tournament_id)
    ensure_accepting(tournament, now)

    tp = store.get_tournament_player(tournament.id, wallet)
    limit = tournament.max_attempts_per_player
    if limit is not None and tp is not None and tp.total_runs >= limit:
        raise MaxAttemptsReached(tournament.id, limit)

    player = store.get_player(wallet)
    xp = calculate_xp(tournament.difficulty, op.time_ms, op.deaths, op.completed)

    # Journal
    run_id = store.allocate_run_id()
    store.add(GameRun(
        id=run_id,
        tournament_id=tournament.id,
        wallet=wallet,
        username=player.username,
        time_ms=op.time_ms,
        score=op.score,
        coins=op.coins,
        deaths=op.deaths,
        completed=op.completed,
        xp_earned=xp,
        created_at=now,
    ))
    store.push_recent_run(run_id)

    # Per-tournament aggregate
    new_participant = tp is None
    if new_participant:
        tp = store.add(TournamentPlayer(
            tournament_id=tournament.id,
            wallet=wallet,
            username=player.username,
            best_time_ms=None,
            best_score=0,
            total_runs=0,
            total_xp_earned=0,
            joined_at=now,
            last_run_at=None,
        ))

    new_best = op.completed and (tp.best_time_ms is None or op.time_ms < tp.best_time_ms)
    if new_best:
        tp.best_time_ms = op.time_ms
    tp.best_score = max(tp.best_score, op.score)
    tp.total_runs += 1
    tp.total_xp_earned += xp
    tp.last_run_at = now

    # Global profile
    player.total_xp += xp
    player.total_runs += 1
    player.last_active = now
    if new_participant:
        player.tournaments_played += 1
    if op.completed and (player.best_time_ms is None or op.time_ms < player.best_time_ms):
        player.best_time_ms = op.time_ms

    tournament.total_runs += 1
    if new_participant:
        tournament.participant_count += 1
    store.session.flush()

    # Leaderboard
    board, rank = update_leaderboard(
        store.load_leaderboard(tournament.id),
        Standing(
            wallet=wallet,
            username=player.username,
            best_time_ms=tp.best_time_ms,
            best_score=tp.best_score,
            total_runs=tp.total_runs,
            total_xp=tp.total_xp_earned,
        ),
    )
    store.save_leaderboard(tournament.id, board)

    logger.debug(
        "Run %d: %s in tournament %d, %d ms, completed=%s, +%d XP, rank %d%s",
        run_id, wallet, tournament.id, op.time_ms, op.completed, xp, rank,
        " (new best)" if new_best else "",
    )
    return RunSubmitted(run_id=run_id, xp_earned=xp, new_best=new_best, rank=rank)
