"""
tests/test_store.py — Register & Leaderboard Persistence Tests
===============================================================
"""

from __future__ import annotations

from conftest import T0, WALLET_A, WALLET_B, WALLET_C
from sqlalchemy import select

from labyrinth.constants import RECENT_RUNS_LIMIT
from labyrinth.database.models import LeaderboardEntry, Player, Tournament
from labyrinth.engine.leaderboard import Standing
from labyrinth.services.store import Store


def _seed(session) -> Store:
    store = Store(session)
    store.add(Tournament(
        id=1, title="T", description="", maze_seed="s", difficulty="Medium",
        start_time=T0, end_time=T0 + 1, status="Active", created_at=T0,
    ))
    for wallet in (WALLET_A, WALLET_B, WALLET_C):
        store.add(Player(wallet=wallet, username=wallet[-4:], registered_at=T0, last_active=T0))
    return store


class TestRegisters:
    def test_defaults(self, db_session):
        store = Store(db_session)
        assert store.get_next_tournament_id() == 1
        assert store.get_next_run_id() == 1
        assert store.get_active_tournament_id() is None
        assert store.get_recent_run_ids() == []

    def test_allocation_is_monotonic(self, db_session):
        store = Store(db_session)
        assert [store.allocate_run_id() for _ in range(3)] == [1, 2, 3]
        assert store.get_next_run_id() == 4

    def test_active_handle_can_be_cleared(self, db_session):
        store = Store(db_session)
        store.set_active_tournament_id(7)
        assert store.get_active_tournament_id() == 7
        store.set_active_tournament_id(None)
        assert store.get_active_tournament_id() is None

    def test_recent_runs_are_newest_first_and_bounded(self, db_session):
        store = Store(db_session)
        for run_id in range(1, RECENT_RUNS_LIMIT + 6):
            store.push_recent_run(run_id)
        recent = store.get_recent_run_ids()
        assert len(recent) == RECENT_RUNS_LIMIT
        assert recent[0] == RECENT_RUNS_LIMIT + 5
        assert recent[-1] == 6


class TestUsernamesAndSigners:
    def test_username_index(self, db_session):
        store = _seed(db_session)
        store.index_username("alice", WALLET_A)
        assert store.wallet_for_username("alice") == WALLET_A
        store.unindex_username("alice")
        assert store.wallet_for_username("alice") is None

    def test_rebinding_signer_moves_it(self, db_session):
        store = _seed(db_session)
        store.bind_signer("tok", WALLET_A, T0)
        store.bind_signer("tok", WALLET_B, T0 + 5)
        assert store.wallet_for_signer("tok") == WALLET_B


class TestLeaderboardPersistence:
    def test_round_trip_in_rank_order(self, db_session):
        store = _seed(db_session)
        store.save_leaderboard(1, [
            Standing(WALLET_A, "a", 60_000, rank=1),
            Standing(WALLET_B, "b", 70_000, rank=2),
        ])
        assert [(s.wallet, s.rank) for s in store.load_leaderboard(1)] == [
            (WALLET_A, 1), (WALLET_B, 2),
        ]

    def test_save_updates_inserts_and_deletes(self, db_session):
        store = _seed(db_session)
        store.save_leaderboard(1, [
            Standing(WALLET_A, "a", 60_000, rank=1),
            Standing(WALLET_B, "b", 70_000, rank=2),
        ])
        store.save_leaderboard(1, [
            Standing(WALLET_C, "c", 10_000, rank=1),
            Standing(WALLET_A, "a", 60_000, rank=2),
        ])
        rows = db_session.scalars(
            select(LeaderboardEntry).order_by(LeaderboardEntry.rank)
        ).all()
        assert [(r.wallet, r.rank) for r in rows] == [(WALLET_C, 1), (WALLET_A, 2)]
