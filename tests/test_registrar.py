"""
tests/test_registrar.py — Player Registration & Caller Resolution Tests
========================================================================
"""

from __future__ import annotations

from dataclasses import replace

from conftest import T0, WALLET_A, WALLET_B
from sqlalchemy.orm import Session

from labyrinth.database.models import GameRun, Player
from labyrinth.engine.operations import (
    ErrorResponse,
    PlayerRegistered,
    ProfileUpdated,
    RegisterPlayer,
    SubmitRun,
    UpdateProfile,
)
from labyrinth.services.store import Store


class TestRegisterPlayer:
    def test_creates_player(self, dispatcher, db_engine):
        resp = dispatcher.execute("tok-a", RegisterPlayer(WALLET_A.upper().replace("0X", "0x"), " alice "))
        assert resp == PlayerRegistered(wallet=WALLET_A)
        with Session(db_engine) as s:
            player = s.get(Player, WALLET_A)
            assert player.username == "alice"
            assert player.total_xp == 0
            assert player.best_time_ms is None
            assert player.registered_at == T0
            store = Store(s)
            assert store.wallet_for_username("alice") == WALLET_A
            assert store.wallet_for_signer("tok-a") == WALLET_A

    def test_same_arguments_twice_is_idempotent(self, dispatcher, clock, db_engine):
        dispatcher.execute("tok-a", RegisterPlayer(WALLET_A, "alice"))
        clock.advance(1_000)
        resp = dispatcher.execute("tok-a", RegisterPlayer(WALLET_A, "alice"))
        assert resp == PlayerRegistered(wallet=WALLET_A)
        with Session(db_engine) as s:
            assert s.get(Player, WALLET_A).last_active == T0

    def test_existing_wallet_only_binds_new_signer(self, dispatcher, db_engine):
        dispatcher.execute("tok-a", RegisterPlayer(WALLET_A, "alice"))
        resp = dispatcher.execute("tok-a2", RegisterPlayer(WALLET_A, "alice2"))
        assert resp == PlayerRegistered(wallet=WALLET_A)
        with Session(db_engine) as s:
            assert s.get(Player, WALLET_A).username == "alice"
            store = Store(s)
            assert store.wallet_for_signer("tok-a2") == WALLET_A
            assert store.wallet_for_username("alice2") is None

    def test_username_taken(self, dispatcher):
        dispatcher.execute("tok-a", RegisterPlayer(WALLET_A, "alice"))
        resp = dispatcher.execute("tok-b", RegisterPlayer(WALLET_B, "alice"))
        assert isinstance(resp, ErrorResponse)
        assert resp.kind == "UsernameTaken"

    def test_requires_signer(self, dispatcher):
        resp = dispatcher.execute(None, RegisterPlayer(WALLET_A, "alice"))
        assert resp.kind == "NotAuthenticated"

    def test_rejects_bad_wallet_and_username(self, dispatcher):
        assert dispatcher.execute("t", RegisterPlayer("0x12", "alice")).kind == "InvalidInput"
        assert dispatcher.execute("t", RegisterPlayer(WALLET_A, "   ")).kind == "InvalidInput"
        assert dispatcher.execute("t", RegisterPlayer(WALLET_A, "x" * 33)).kind == "InvalidInput"


class TestUpdateProfile:
    def test_rename_moves_index_but_not_snapshots(self, bootstrapped, db_engine):
        bootstrapped.execute("signer-a", SubmitRun(1, 60_000, 10, 0, 0, True))
        resp = bootstrapped.execute("signer-a", UpdateProfile("alicia"))
        assert resp == ProfileUpdated(wallet=WALLET_A)
        with Session(db_engine) as s:
            store = Store(s)
            assert store.wallet_for_username("alicia") == WALLET_A
            assert store.wallet_for_username("alice") is None
            assert s.get(Player, WALLET_A).username == "alicia"
            assert s.get(GameRun, 1).username == "alice"
            assert store.load_leaderboard(1)[0].username == "alice"

    def test_rename_to_taken_name(self, bootstrapped):
        resp = bootstrapped.execute("signer-a", UpdateProfile("bob"))
        assert resp.kind == "UsernameTaken"

    def test_unregistered_caller(self, bootstrapped):
        resp = bootstrapped.execute("0x" + "ee" * 20, UpdateProfile("eve"))
        assert resp.kind == "NotRegistered"


class TestAutoBind:
    def test_address_signer_is_auto_registered(self, bootstrapped, db_engine):
        wallet = "0x" + "deadbeef" + "11" * 16
        resp = bootstrapped.execute(wallet, SubmitRun(1, 60_000, 1, 0, 0, True))
        assert resp.run_id == 1
        with Session(db_engine) as s:
            assert s.get(Player, wallet).username == "Player_deadbeef"
            assert Store(s).wallet_for_signer(wallet) == wallet

    def test_falls_back_to_full_hex_when_short_name_taken(self, bootstrapped, db_engine):
        first = "0x" + "deadbeef" + "11" * 16
        second = "0x" + "deadbeef" + "22" * 16
        bootstrapped.execute(first, SubmitRun(1, 60_000, 1, 0, 0, True))
        bootstrapped.execute(second, SubmitRun(1, 60_000, 1, 0, 0, True))
        with Session(db_engine) as s:
            assert s.get(Player, second).username == "Player_" + second[2:]

    def test_opaque_signer_is_not_registered(self, bootstrapped):
        resp = bootstrapped.execute("opaque", SubmitRun(1, 60_000, 1, 0, 0, True))
        assert resp.kind == "NotRegistered"

    def test_disabled_by_config(self, bootstrapped, config):
        bootstrapped.config = replace(config, auto_bind_signers=False)
        resp = bootstrapped.execute("0x" + "ee" * 20, SubmitRun(1, 60_000, 1, 0, 0, True))
        assert resp.kind == "NotRegistered"
