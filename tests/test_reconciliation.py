"""
tests/test_reconciliation.py — Drift Detection Tests
=====================================================
"""

from __future__ import annotations

from conftest import WALLET_A
from sqlalchemy.orm import Session

from labyrinth.database.models import LeaderboardEntry, Player, Tournament
from labyrinth.engine.operations import SubmitRun
from labyrinth.services.reconciliation_service import find_drift


def test_clean_state_has_no_drift(bootstrapped, db_engine):
    bootstrapped.execute("signer-a", SubmitRun(1, 60_000, 0, 0, 0, True))
    with Session(db_engine) as s:
        assert find_drift(s) == []


def test_detects_tampered_counters(bootstrapped, db_engine):
    bootstrapped.execute("signer-a", SubmitRun(1, 60_000, 0, 0, 0, True))
    with Session(db_engine) as s:
        s.get(Tournament, 1).participant_count = 5
        s.get(Player, WALLET_A).total_xp += 1
        s.flush()
        kinds = {d["kind"] for d in find_drift(s)}
        s.rollback()
    assert kinds == {"participant_count", "player_total_xp"}


def test_detects_bad_ranks(bootstrapped, db_engine):
    bootstrapped.execute("signer-a", SubmitRun(1, 60_000, 0, 0, 0, True))
    with Session(db_engine) as s:
        s.get(LeaderboardEntry, (1, WALLET_A)).rank = 3
        s.flush()
        drift = find_drift(s)
        s.rollback()
    assert [d["kind"] for d in drift] == ["leaderboard_ranks"]
    assert drift[0]["stored"] == [3]
