"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
Runs the routers against an in-memory database by overriding the engine,
session and dispatcher dependencies.
"""

from __future__ import annotations

import pytest
from conftest import WALLET_A
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from labyrinth.api.deps import create_access_token
from labyrinth.api.main import app
from labyrinth.api.routes import operations, public
from labyrinth.constants import MICROS_PER_DAY
from labyrinth.database.models import Tournament


@pytest.fixture
def client(dispatcher, db_engine):
    def _session():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[operations.get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[public.get_session] = _session
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _auth(signer: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(signer)}"}


def _bootstrap(client) -> None:
    resp = client.post("/api/tournaments/bootstrap")
    assert resp.status_code == 200


# ===========================================================================
# Health & public reads
# ===========================================================================
class TestPublicRoutes:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_active_tournament(self, client):
        assert client.get("/api/tournaments/active").status_code == 404
        _bootstrap(client)
        data = client.get("/api/tournaments/active").json()
        assert data["id"] == 1
        assert data["status"] == "Active"

    def test_unknown_rows_are_404(self, client):
        assert client.get("/api/tournaments/9").status_code == 404
        assert client.get(f"/api/players/{WALLET_A}").status_code == 404
        assert client.get("/api/runs/1").status_code == 404

    def test_xp_preview(self, client):
        resp = client.get("/api/xp/preview", params={"difficulty": "Medium", "time_ms": 60_000})
        assert resp.status_code == 200
        assert resp.json()["total"] == 250

    def test_stats(self, client):
        _bootstrap(client)
        assert client.get("/api/stats").json()["total_tournaments"] == 1

    @pytest.mark.parametrize("path", [
        f"/api/tournaments/{2**63}",
        f"/api/tournaments/{2**64}/leaderboard",
        f"/api/tournaments/{2**64}/players/{WALLET_A}",
        f"/api/tournaments/{2**64}/rewards/{WALLET_A}",
        f"/api/runs/{2**64}",
        "/api/runs/-1",
    ])
    def test_ids_beyond_bigint_are_422(self, client, path):
        assert client.get(path).status_code == 422

    def test_drift_is_clean_after_activity(self, client):
        _bootstrap(client)
        client.post("/api/tournaments/1/runs", json={"time_ms": 60_000, "completed": True},
                    headers=_auth(WALLET_A))
        assert client.get("/api/reconciliation/drift").json() == {"clean": True, "drift": []}

    def test_drift_reports_tampered_counter(self, client, db_engine):
        _bootstrap(client)
        with Session(db_engine) as s:
            s.get(Tournament, 1).total_runs = 7
            s.commit()
        data = client.get("/api/reconciliation/drift").json()
        assert data["clean"] is False
        assert data["drift"] == [
            {"kind": "tournament_total_runs", "key": 1, "stored": 7, "actual": 0},
        ]


# ===========================================================================
# Operations
# ===========================================================================
class TestOperationRoutes:
    def test_register_submit_and_read_back(self, client):
        _bootstrap(client)
        resp = client.post(
            "/api/players", json={"wallet": WALLET_A, "username": "alice"}, headers=_auth("tok")
        )
        assert resp.status_code == 201
        assert resp.json() == {"type": "PlayerRegistered", "wallet": WALLET_A}

        resp = client.post(
            "/api/tournaments/1/runs",
            json={"time_ms": 60_000, "score": 10, "completed": True},
            headers=_auth("tok"),
        )
        assert resp.status_code == 201
        assert resp.json() == {
            "type": "RunSubmitted", "run_id": 1, "xp_earned": 250, "new_best": True, "rank": 1,
        }

        board = client.get("/api/tournaments/1/leaderboard").json()
        assert [e["wallet"] for e in board["entries"]] == [WALLET_A]
        assert client.get("/api/players/by-username/alice").json()["wallet"] == WALLET_A
        assert [r["id"] for r in client.get("/api/runs/recent").json()["runs"]] == [1]

    def test_rename(self, client):
        client.post("/api/players", json={"wallet": WALLET_A, "username": "alice"}, headers=_auth("tok"))
        resp = client.patch("/api/players/me", json={"username": "alicia"}, headers=_auth("tok"))
        assert resp.status_code == 200
        assert client.get(f"/api/players/{WALLET_A}").json()["username"] == "alicia"

    def test_submit_without_token_is_401(self, client):
        _bootstrap(client)
        resp = client.post("/api/tournaments/1/runs", json={"time_ms": 1, "completed": True})
        assert resp.status_code == 401
        assert resp.json()["detail"]["kind"] == "NotAuthenticated"

    def test_invalid_token_is_401(self, client):
        resp = client.post("/api/tournaments/1/join", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_unregistered_signer_is_403(self, client):
        _bootstrap(client)
        resp = client.post("/api/tournaments/1/join", headers=_auth("opaque"))
        assert resp.status_code == 403

    def test_end_before_due_is_409(self, client):
        _bootstrap(client)
        resp = client.post("/api/tournaments/1/end")
        assert resp.status_code == 409
        assert resp.json()["detail"]["kind"] == "NotYetDue"

    def test_create_validation(self, client):
        body = {"title": "X", "maze_seed": "s", "duration_days": 0}
        resp = client.post("/api/tournaments", json=body)
        assert resp.status_code == 422
        assert resp.json()["detail"]["kind"] == "InvalidDuration"

    def test_oversized_coins_is_422(self, client):
        _bootstrap(client)
        resp = client.post(
            "/api/tournaments/1/runs",
            json={"time_ms": 1, "coins": 2**32, "completed": True},
            headers=_auth(WALLET_A),
        )
        assert resp.status_code == 422

    def test_end_and_claim(self, client, clock):
        _bootstrap(client)
        client.post("/api/tournaments/1/runs", json={"time_ms": 60_000, "completed": True},
                    headers=_auth(WALLET_A))
        clock.advance(15 * MICROS_PER_DAY)
        resp = client.post("/api/tournaments/1/end")
        assert resp.json() == {"type": "TournamentEnded", "id": 1, "winner_count": 1}

        resp = client.post("/api/tournaments/1/claim", headers=_auth(WALLET_A))
        assert resp.json() == {"type": "RewardClaimed", "tournament_id": 1, "xp_amount": 4_000}
        assert client.post("/api/tournaments/1/claim", headers=_auth(WALLET_A)).status_code == 409
        assert client.get(f"/api/tournaments/1/rewards/{WALLET_A}").json()["claimed"] is True

    @pytest.mark.parametrize("action", ["join", "end", "claim"])
    def test_tournament_id_beyond_bigint_is_422(self, client, action):
        _bootstrap(client)
        resp = client.post(f"/api/tournaments/{2**64}/{action}", headers=_auth(WALLET_A))
        assert resp.status_code == 422
