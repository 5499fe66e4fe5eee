"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of labyrinth.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import BigInteger, Engine, create_engine  # noqa: E402
from sqlalchemy.ext.compiler import compiles  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from labyrinth.config import default_config  # noqa: E402
from labyrinth.database.models import Base  # noqa: E402
from labyrinth.engine.clock import ManualClock  # noqa: E402
from labyrinth.engine.operations import BootstrapTournament, RegisterPlayer  # noqa: E402
from labyrinth.services.dispatcher import Dispatcher  # noqa: E402


# ---------------------------------------------------------------------------
# SQLite renders BigInteger as INTEGER (64-bit, same affinity as PG BIGINT).
# ---------------------------------------------------------------------------
@compiles(BigInteger, "sqlite")
def _compile_bigint_as_integer(type_, compiler, **kw):
    return "INTEGER"


T0 = 1_700_000_000 * 1_000_000

WALLET_A = "0x" + "aa" * 20
WALLET_B = "0x" + "bb" * 20
WALLET_C = "0x" + "cc" * 20


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Labyrinth tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` behind ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def dispatcher(db_engine, clock, config) -> Dispatcher:
    return Dispatcher(db_engine, clock=clock, config=config)


@pytest.fixture
def bootstrapped(dispatcher) -> Dispatcher:
    """Dispatcher with tournament #1 running and players A and B registered."""
    dispatcher.execute(None, BootstrapTournament())
    dispatcher.execute("signer-a", RegisterPlayer(WALLET_A, "alice"))
    dispatcher.execute("signer-b", RegisterPlayer(WALLET_B, "bob"))
    return dispatcher

