"""
labyrinth.services.store — Typed Registers & Maps over one Session
===================================================================

Every read and write an operation performs goes through a :class:`Store`
bound to that operation's session.  Writes are flushed immediately so
later reads in the same operation see them; the dispatcher commits or
rolls back the whole session at the end.

Registers (singleton slots, JSON in the ``registers`` table):

- ``next_tournament_id`` — next unused tournament id (starts at 1)
- ``next_run_id``        — next unused run id (starts at 1)
- ``active_tournament_id`` — cached id of the active tournament, or null
- ``recent_run_ids``     — newest-first ring of the last 100 run ids

Maps are the ORM tables, keyed by id, wallet, ``(tournament_id, wallet)``,
username, or signer token.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from labyrinth.constants import RECENT_RUNS_LIMIT
from labyrinth.database.models import (
    LeaderboardEntry,
    Player,
    Register,
    SignerBinding,
    Tournament,
    TournamentPlayer,
    TournamentReward,
    UsernameIndex,
)
from labyrinth.engine.leaderboard import Standing

logger = logging.getLogger(__name__)

NEXT_TOURNAMENT_ID_KEY = "next_tournament_id"
NEXT_RUN_ID_KEY = "next_run_id"
ACTIVE_TOURNAMENT_KEY = "active_tournament_id"
RECENT_RUNS_KEY = "recent_run_ids"


class Store:
    """Typed key/value facade for one operation's session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -------------------------------------------------------------------
    # Registers
    # -------------------------------------------------------------------
    def _get_register(self, key: str, default: Any = None) -> Any:
        row = self.session.get(Register, key)
        if row is None:
            return default
        return json.loads(row.value_json)

    def _set_register(self, key: str, value: Any) -> None:
        row = self.session.get(Register, key)
        if row is None:
            self.session.add(Register(key=key, value_json=json.dumps(value)))
        else:
            row.value_json = json.dumps(value)
        self.session.flush()

    def get_next_tournament_id(self) -> int:
        return int(self._get_register(NEXT_TOURNAMENT_ID_KEY, 1))

    def set_next_tournament_id(self, value: int) -> None:
        self._set_register(NEXT_TOURNAMENT_ID_KEY, value)

    def allocate_tournament_id(self) -> int:
        tournament_id = self.get_next_tournament_id()
        self.set_next_tournament_id(tournament_id + 1)
        return tournament_id

    def get_next_run_id(self) -> int:
        return int(self._get_register(NEXT_RUN_ID_KEY, 1))

    def set_next_run_id(self, value: int) -> None:
        self._set_register(NEXT_RUN_ID_KEY, value)

    def allocate_run_id(self) -> int:
        run_id = self.get_next_run_id()
        self.set_next_run_id(run_id + 1)
        return run_id

    def get_active_tournament_id(self) -> int | None:
        return self._get_register(ACTIVE_TOURNAMENT_KEY)

    def set_active_tournament_id(self, tournament_id: int | None) -> None:
        self._set_register(ACTIVE_TOURNAMENT_KEY, tournament_id)

    def get_recent_run_ids(self) -> list[int]:
        return list(self._get_register(RECENT_RUNS_KEY, []))

    def set_recent_run_ids(self, run_ids: list[int]) -> None:
        self._set_register(RECENT_RUNS_KEY, run_ids[:RECENT_RUNS_LIMIT])

    def push_recent_run(self, run_id: int) -> None:
        self.set_recent_run_ids([run_id, *self.get_recent_run_ids()])

    # -------------------------------------------------------------------
    # Maps
    # -------------------------------------------------------------------
    def add(self, row: Any) -> Any:
        """Insert *row* and flush so it is visible to later reads."""
        self.session.add(row)
        self.session.flush()
        return row

    def get_tournament(self, tournament_id: int) -> Tournament | None:
        return self.session.get(Tournament, tournament_id)

    def get_player(self, wallet: str) -> Player | None:
        return self.session.get(Player, wallet)

    def get_tournament_player(self, tournament_id: int, wallet: str) -> TournamentPlayer | None:
        return self.session.get(TournamentPlayer, (tournament_id, wallet))

    def get_reward(self, tournament_id: int, wallet: str) -> TournamentReward | None:
        return self.session.get(TournamentReward, (tournament_id, wallet))

    def wallet_for_username(self, username: str) -> str | None:
        row = self.session.get(UsernameIndex, username)
        return row.wallet if row else None

    def index_username(self, username: str, wallet: str) -> None:
        self.add(UsernameIndex(username=username, wallet=wallet))

    def unindex_username(self, username: str) -> None:
        row = self.session.get(UsernameIndex, username)
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def wallet_for_signer(self, signer: str) -> str | None:
        row = self.session.get(SignerBinding, signer)
        return row.wallet if row else None

    def bind_signer(self, signer: str, wallet: str, now: int) -> None:
        row = self.session.get(SignerBinding, signer)
        if row is None:
            self.add(SignerBinding(signer=signer, wallet=wallet, bound_at=now))
        elif row.wallet != wallet:
            logger.info("Signer %s rebound %s → %s", signer, row.wallet, wallet)
            row.wallet = wallet
            row.bound_at = now
            self.session.flush()

    # -------------------------------------------------------------------
    # Leaderboards
    # -------------------------------------------------------------------
    def _leaderboard_rows(self, tournament_id: int) -> list[LeaderboardEntry]:
        return list(self.session.scalars(
            select(LeaderboardEntry)
            .where(LeaderboardEntry.tournament_id == tournament_id)
            .order_by(LeaderboardEntry.rank)
        ).all())

    def load_leaderboard(self, tournament_id: int) -> list[Standing]:
        """Leaderboard of *tournament_id* in rank order."""
        return [
            Standing(
                wallet=row.wallet,
                username=row.username,
                best_time_ms=row.best_time_ms,
                best_score=row.best_score,
                total_runs=row.total_runs,
                total_xp=row.total_xp,
                rank=row.rank,
            )
            for row in self._leaderboard_rows(tournament_id)
        ]

    def save_leaderboard(self, tournament_id: int, standings: list[Standing]) -> None:
        """Replace the stored leaderboard with *standings*.

        Rows are updated in place by wallet; wallets that fell off the list
        are deleted.
        """
        existing = {row.wallet: row for row in self._leaderboard_rows(tournament_id)}
        keep = set()
        for standing in standings:
            keep.add(standing.wallet)
            row = existing.get(standing.wallet)
            if row is None:
                row = LeaderboardEntry(tournament_id=tournament_id, wallet=standing.wallet)
                self.session.add(row)
            row.rank = standing.rank
            row.username = standing.username
            row.best_time_ms = standing.best_time_ms
            row.best_score = standing.best_score
            row.total_runs = standing.total_runs
            row.total_xp = standing.total_xp
        for wallet, row in existing.items():
            if wallet not in keep:
                self.session.delete(row)
        self.session.flush()
