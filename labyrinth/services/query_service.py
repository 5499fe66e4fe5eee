"""
labyrinth.services.query_service — Read-only Queries
=====================================================

Every function takes an open session and never writes.  The API opens one
session per request, so callers only ever see committed state.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from labyrinth.constants import LEADERBOARD_SIZE, RECENT_RUNS_LIMIT
from labyrinth.database.models import (
    GameRun,
    LeaderboardEntry,
    Player,
    Tournament,
    TournamentPlayer,
    TournamentReward,
    TournamentStatus,
)
from labyrinth.engine.identity import is_wallet, normalize_wallet
from labyrinth.services.store import Store


def _wallet_or_none(wallet: str) -> str | None:
    return normalize_wallet(wallet) if is_wallet(wallet) else None


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------
def get_tournament(session: Session, tournament_id: int) -> Tournament | None:
    return session.get(Tournament, tournament_id)


def list_tournaments(
    session: Session,
    status: TournamentStatus | str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> list[Tournament]:
    """Tournaments newest first, optionally filtered by status."""
    q = select(Tournament).order_by(Tournament.id.desc())
    if status is not None:
        q = q.where(Tournament.status == TournamentStatus(status).value)
    return list(session.scalars(q.offset(offset).limit(limit)).all())


def get_active_tournament(session: Session) -> Tournament | None:
    """The tournament behind the cached handle, if it is still Active."""
    active_id = Store(session).get_active_tournament_id()
    if active_id is None:
        return None
    tournament = session.get(Tournament, active_id)
    if tournament is None or not tournament.is_active:
        return None
    return tournament


def get_leaderboard(
    session: Session, tournament_id: int, limit: int = LEADERBOARD_SIZE
) -> list[LeaderboardEntry]:
    return list(session.scalars(
        select(LeaderboardEntry)
        .where(LeaderboardEntry.tournament_id == tournament_id)
        .order_by(LeaderboardEntry.rank)
        .limit(limit)
    ).all())


def get_tournament_player(
    session: Session, tournament_id: int, wallet: str
) -> TournamentPlayer | None:
    wallet = _wallet_or_none(wallet)
    if wallet is None:
        return None
    return session.get(TournamentPlayer, (tournament_id, wallet))


def has_joined(session: Session, tournament_id: int, wallet: str) -> bool:
    return get_tournament_player(session, tournament_id, wallet) is not None


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
def get_player(session: Session, wallet: str) -> Player | None:
    wallet = _wallet_or_none(wallet)
    return session.get(Player, wallet) if wallet else None


def get_player_by_username(session: Session, username: str) -> Player | None:
    wallet = Store(session).wallet_for_username(username.strip())
    return session.get(Player, wallet) if wallet else None


def is_registered(session: Session, wallet: str) -> bool:
    return get_player(session, wallet) is not None


def get_player_runs(
    session: Session, wallet: str, limit: int = RECENT_RUNS_LIMIT
) -> list[GameRun]:
    """Runs by *wallet* across all tournaments, newest first."""
    wallet = _wallet_or_none(wallet)
    if wallet is None:
        return []
    return list(session.scalars(
        select(GameRun)
        .where(GameRun.wallet == wallet)
        .order_by(GameRun.id.desc())
        .limit(limit)
    ).all())


def get_reward(session: Session, tournament_id: int, wallet: str) -> TournamentReward | None:
    wallet = _wallet_or_none(wallet)
    if wallet is None:
        return None
    return session.get(TournamentReward, (tournament_id, wallet))


def get_player_rewards(session: Session, wallet: str) -> list[TournamentReward]:
    wallet = _wallet_or_none(wallet)
    if wallet is None:
        return []
    return list(session.scalars(
        select(TournamentReward)
        .where(TournamentReward.wallet == wallet)
        .order_by(TournamentReward.tournament_id)
    ).all())


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------
def get_run(session: Session, run_id: int) -> GameRun | None:
    return session.get(GameRun, run_id)


def get_recent_runs(session: Session, limit: int = RECENT_RUNS_LIMIT) -> list[GameRun]:
    """The newest runs across all tournaments, newest first."""
    run_ids = Store(session).get_recent_run_ids()[:limit]
    if not run_ids:
        return []
    by_id = {
        run.id: run
        for run in session.scalars(select(GameRun).where(GameRun.id.in_(run_ids))).all()
    }
    return [by_id[run_id] for run_id in run_ids if run_id in by_id]


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
def get_stats(session: Session) -> dict:
    return {
        "total_players": session.scalar(select(func.count()).select_from(Player)) or 0,
        "total_tournaments": session.scalar(select(func.count()).select_from(Tournament)) or 0,
        "total_runs": session.scalar(select(func.count()).select_from(GameRun)) or 0,
        "active_tournaments": session.scalar(
            select(func.count())
            .select_from(Tournament)
            .where(Tournament.status == TournamentStatus.ACTIVE.value)
        ) or 0,
    }
