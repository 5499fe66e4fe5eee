"""
tests/test_submission_service.py — Run Submission Pipeline Tests
=================================================================
"""

from __future__ import annotations

from conftest import T0, WALLET_A, WALLET_B
from sqlalchemy.orm import Session

from labyrinth.constants import MICROS_PER_DAY
from labyrinth.database.models import GameRun, Player, Tournament, TournamentPlayer
from labyrinth.engine.operations import CreateTournament, RunSubmitted, SubmitRun
from labyrinth.services.store import Store


def _run(tid=1, time_ms=60_000, score=100, coins=0, deaths=0, completed=True) -> SubmitRun:
    return SubmitRun(tid, time_ms, score, coins, deaths, completed)


class TestSubmitRun:
    def test_first_completed_run(self, bootstrapped, db_engine):
        resp = bootstrapped.execute("signer-a", _run())
        assert resp == RunSubmitted(run_id=1, xp_earned=250, new_best=True, rank=1)
        with Session(db_engine) as s:
            run = s.get(GameRun, 1)
            assert (run.wallet, run.username, run.time_ms, run.xp_earned, run.created_at) == (
                WALLET_A, "alice", 60_000, 250, T0,
            )
            tp = s.get(TournamentPlayer, (1, WALLET_A))
            assert (tp.best_time_ms, tp.best_score, tp.total_runs, tp.total_xp_earned) == (
                60_000, 100, 1, 250,
            )
            player = s.get(Player, WALLET_A)
            assert (player.total_xp, player.total_runs, player.tournaments_played) == (250, 1, 1)
            assert player.best_time_ms == 60_000
            t = s.get(Tournament, 1)
            assert (t.participant_count, t.total_runs) == (1, 1)
            assert Store(s).get_recent_run_ids() == [1]

    def test_slower_run_is_not_a_new_best(self, bootstrapped, db_engine):
        bootstrapped.execute("signer-a", _run(time_ms=60_000, score=50))
        resp = bootstrapped.execute("signer-a", _run(time_ms=90_000, score=80))
        assert resp.new_best is False
        assert resp.rank == 1
        with Session(db_engine) as s:
            tp = s.get(TournamentPlayer, (1, WALLET_A))
            assert tp.best_time_ms == 60_000
            assert tp.best_score == 80
            assert s.get(Tournament, 1).participant_count == 1

    def test_incomplete_run_earns_xp_but_no_rank(self, bootstrapped, db_engine):
        resp = bootstrapped.execute("signer-a", _run(time_ms=30_000, completed=False))
        assert resp == RunSubmitted(run_id=1, xp_earned=100, new_best=False, rank=0)
        with Session(db_engine) as s:
            assert s.get(TournamentPlayer, (1, WALLET_A)).best_time_ms is None
            assert s.get(Player, WALLET_A).best_time_ms is None
            assert Store(s).load_leaderboard(1) == []

    def test_xp_uses_tournament_difficulty(self, bootstrapped):
        bootstrapped.execute(None, CreateTournament("N", "", "n", "Nightmare", 1, 0))
        resp = bootstrapped.execute("signer-a", _run(tid=2, time_ms=0))
        assert resp.xp_earned == 450

    def test_global_best_spans_tournaments(self, bootstrapped, db_engine):
        bootstrapped.execute(None, CreateTournament("Two", "", "two", "Easy", 1, 0))
        bootstrapped.execute("signer-a", _run(tid=1, time_ms=80_000))
        bootstrapped.execute("signer-a", _run(tid=2, time_ms=50_000))
        with Session(db_engine) as s:
            player = s.get(Player, WALLET_A)
            assert player.best_time_ms == 50_000
            assert player.tournaments_played == 2

    def test_run_ids_are_global_and_sequential(self, bootstrapped, db_engine):
        bootstrapped.execute(None, CreateTournament("Two", "", "two", "Easy", 1, 0))
        ids = [
            bootstrapped.execute("signer-a", _run(tid=1)).run_id,
            bootstrapped.execute("signer-b", _run(tid=2)).run_id,
            bootstrapped.execute("signer-a", _run(tid=2)).run_id,
        ]
        assert ids == [1, 2, 3]
        with Session(db_engine) as s:
            assert Store(s).get_recent_run_ids() == [3, 2, 1]


class TestPreconditions:
    def test_no_signer(self, bootstrapped):
        assert bootstrapped.execute(None, _run()).kind == "NotAuthenticated"

    def test_unknown_tournament(self, bootstrapped):
        assert bootstrapped.execute("signer-a", _run(tid=9)).kind == "TournamentNotFound"

    def test_after_end_time(self, bootstrapped, clock, db_engine):
        clock.advance(15 * MICROS_PER_DAY)
        resp = bootstrapped.execute("signer-a", _run())
        assert resp.kind == "TournamentEnded"
        with Session(db_engine) as s:
            assert s.get(Tournament, 1).total_runs == 0
            assert Store(s).get_next_run_id() == 1

    def test_max_attempts(self, bootstrapped, db_engine):
        bootstrapped.execute(None, CreateTournament(
            "Limited", "", "lim", "Medium", 1, 100, max_attempts_per_player=2
        ))
        assert bootstrapped.execute("signer-a", _run(tid=2)).run_id == 1
        assert bootstrapped.execute("signer-a", _run(tid=2)).run_id == 2
        resp = bootstrapped.execute("signer-a", _run(tid=2))
        assert resp.kind == "MaxAttemptsReached"
        assert bootstrapped.execute("signer-b", _run(tid=2)).run_id == 3


class TestLeaderboardIntegration:
    def test_overtaking(self, bootstrapped):
        assert bootstrapped.execute("signer-a", _run(time_ms=90_000)).rank == 1
        assert bootstrapped.execute("signer-b", _run(time_ms=70_000)).rank == 1
        assert bootstrapped.execute("signer-a", _run(time_ms=60_000)).rank == 1

    def test_board_keeps_totals(self, bootstrapped, db_engine):
        bootstrapped.execute("signer-b", _run(time_ms=70_000))
        bootstrapped.execute("signer-b", _run(time_ms=80_000, completed=False))
        with Session(db_engine) as s:
            (entry,) = Store(s).load_leaderboard(1)
            assert entry.wallet == WALLET_B
            assert entry.total_runs == 2
            assert entry.best_time_ms == 70_000
