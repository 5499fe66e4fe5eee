"""
labyrinth.api.routes.public — Read-only public endpoints
==========================================================
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from labyrinth.api.deps import get_session
from labyrinth.constants import BIGINT_MAX, LEADERBOARD_SIZE, RECENT_RUNS_LIMIT
from labyrinth.database.models import (
    Difficulty,
    GameRun,
    LeaderboardEntry,
    Player,
    Tournament,
    TournamentPlayer,
    TournamentReward,
    TournamentStatus,
)
from labyrinth.engine.xp import xp_breakdown
from labyrinth.services import query_service, reconciliation_service

router = APIRouter(tags=["public"])

# Row ids are stored as signed BIGINT.
RowId = Annotated[int, Path(ge=0, le=BIGINT_MAX)]


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def tournament_dict(t: Tournament) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "maze_seed": t.maze_seed,
        "difficulty": t.difficulty,
        "start_time": t.start_time,
        "end_time": t.end_time,
        "status": t.status,
        "participant_count": t.participant_count,
        "total_runs": t.total_runs,
        "xp_reward_pool": t.xp_reward_pool,
        "max_attempts_per_player": t.max_attempts_per_player,
        "created_at": t.created_at,
    }


def player_dict(p: Player) -> dict:
    return {
        "wallet": p.wallet,
        "username": p.username,
        "total_xp": p.total_xp,
        "total_runs": p.total_runs,
        "tournaments_played": p.tournaments_played,
        "tournaments_won": p.tournaments_won,
        "best_time_ms": p.best_time_ms,
        "registered_at": p.registered_at,
        "last_active": p.last_active,
    }


def tournament_player_dict(tp: TournamentPlayer) -> dict:
    return {
        "tournament_id": tp.tournament_id,
        "wallet": tp.wallet,
        "username": tp.username,
        "best_time_ms": tp.best_time_ms,
        "best_score": tp.best_score,
        "total_runs": tp.total_runs,
        "total_xp_earned": tp.total_xp_earned,
        "joined_at": tp.joined_at,
        "last_run_at": tp.last_run_at,
    }


def run_dict(r: GameRun) -> dict:
    return {
        "id": r.id,
        "tournament_id": r.tournament_id,
        "wallet": r.wallet,
        "username": r.username,
        "time_ms": r.time_ms,
        "score": r.score,
        "coins": r.coins,
        "deaths": r.deaths,
        "completed": r.completed,
        "xp_earned": r.xp_earned,
        "created_at": r.created_at,
    }


def entry_dict(e: LeaderboardEntry) -> dict:
    return {
        "rank": e.rank,
        "wallet": e.wallet,
        "username": e.username,
        "best_time_ms": e.best_time_ms,
        "best_score": e.best_score,
        "total_runs": e.total_runs,
        "total_xp": e.total_xp,
    }


def reward_dict(r: TournamentReward) -> dict:
    return {
        "tournament_id": r.tournament_id,
        "wallet": r.wallet,
        "rank": r.rank,
        "xp_amount": r.xp_amount,
        "claimed": r.claimed,
        "created_at": r.created_at,
        "claimed_at": r.claimed_at,
    }


def _or_404(row, what: str):
    if row is None:
        raise HTTPException(404, f"{what} not found")
    return row


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
@router.get("/stats")
def get_stats(session: Session = Depends(get_session)):
    return query_service.get_stats(session)


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------
@router.get("/tournaments")
def list_tournaments(
    status: TournamentStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Tournaments newest first, optionally filtered by status."""
    rows = query_service.list_tournaments(
        session, status=status, offset=(page - 1) * page_size, limit=page_size
    )
    return {
        "page": page,
        "page_size": page_size,
        "tournaments": [tournament_dict(t) for t in rows],
    }


@router.get("/tournaments/active")
def get_active_tournament(session: Session = Depends(get_session)):
    return tournament_dict(_or_404(query_service.get_active_tournament(session), "Active tournament"))


@router.get("/tournaments/{tournament_id}")
def get_tournament(tournament_id: RowId, session: Session = Depends(get_session)):
    return tournament_dict(_or_404(query_service.get_tournament(session, tournament_id), "Tournament"))


@router.get("/tournaments/{tournament_id}/leaderboard")
def get_leaderboard(
    tournament_id: RowId,
    limit: int = Query(LEADERBOARD_SIZE, ge=1, le=LEADERBOARD_SIZE),
    session: Session = Depends(get_session),
):
    _or_404(query_service.get_tournament(session, tournament_id), "Tournament")
    entries = query_service.get_leaderboard(session, tournament_id, limit)
    return {"tournament_id": tournament_id, "entries": [entry_dict(e) for e in entries]}


@router.get("/tournaments/{tournament_id}/players/{wallet}")
def get_tournament_player(
    tournament_id: RowId, wallet: str, session: Session = Depends(get_session)
):
    tp = query_service.get_tournament_player(session, tournament_id, wallet)
    return tournament_player_dict(_or_404(tp, "Tournament player"))


@router.get("/tournaments/{tournament_id}/rewards/{wallet}")
def get_reward(tournament_id: RowId, wallet: str, session: Session = Depends(get_session)):
    return reward_dict(_or_404(query_service.get_reward(session, tournament_id, wallet), "Reward"))


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
@router.get("/players/by-username/{username}")
def get_player_by_username(username: str, session: Session = Depends(get_session)):
    return player_dict(_or_404(query_service.get_player_by_username(session, username), "Player"))


@router.get("/players/{wallet}")
def get_player(wallet: str, session: Session = Depends(get_session)):
    return player_dict(_or_404(query_service.get_player(session, wallet), "Player"))


@router.get("/players/{wallet}/runs")
def get_player_runs(
    wallet: str,
    limit: int = Query(RECENT_RUNS_LIMIT, ge=1, le=500),
    session: Session = Depends(get_session),
):
    return {"wallet": wallet, "runs": [run_dict(r) for r in query_service.get_player_runs(session, wallet, limit)]}


@router.get("/players/{wallet}/rewards")
def get_player_rewards(wallet: str, session: Session = Depends(get_session)):
    return {"wallet": wallet, "rewards": [reward_dict(r) for r in query_service.get_player_rewards(session, wallet)]}


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------
@router.get("/runs/recent")
def get_recent_runs(
    limit: int = Query(RECENT_RUNS_LIMIT, ge=1, le=RECENT_RUNS_LIMIT),
    session: Session = Depends(get_session),
):
    return {"runs": [run_dict(r) for r in query_service.get_recent_runs(session, limit)]}


@router.get("/runs/{run_id}")
def get_run(run_id: RowId, session: Session = Depends(get_session)):
    return run_dict(_or_404(query_service.get_run(session, run_id), "Run"))


# ---------------------------------------------------------------------------
# XP preview
# ---------------------------------------------------------------------------
@router.get("/xp/preview")
def preview_xp(
    difficulty: Difficulty = Query(Difficulty.MEDIUM),
    time_ms: int = Query(..., ge=0),
    deaths: int = Query(0, ge=0),
    completed: bool = Query(True),
):
    """Itemised XP a run would earn, for UI confirmation before submitting."""
    return asdict(xp_breakdown(difficulty, time_ms, deaths, completed))


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------
@router.get("/reconciliation/drift")
def get_drift(session: Session = Depends(get_session)):
    """Recompute every aggregate from runs and rewards and list mismatches."""
    drift = reconciliation_service.find_drift(session)
    return {"clean": not drift, "drift": drift}
