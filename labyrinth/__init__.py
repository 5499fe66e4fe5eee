"""
Labyrinth — Tournament State Machine for Labyrinth Legends
===========================================================
Maintains authoritative state for time-boxed maze-running tournaments:
player identities, per-tournament scoreboards, submitted runs, XP awards
and prize distribution.  Every mutation is an operation executed one at a
time by the dispatcher, so the same operations in the same order always
produce the same state.

Package layout::

    labyrinth/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Base XP, prize split, leaderboard size
    ├── errors.py          # LabyrinthError hierarchy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session/async helpers
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── clock.py       # Microsecond clocks
    │   ├── identity.py    # Signer tokens + wallet parsing
    │   ├── operations.py  # Operation and response envelopes
    │   ├── xp.py          # XP formula
    │   ├── leaderboard.py # Bounded ranked leaderboard
    │   └── prizes.py      # Prize pool split
    ├── services/
    │   ├── store.py               # Typed registers + maps over a Session
    │   ├── registrar.py           # Player registration + signer binding
    │   ├── tournament_service.py  # Bootstrap / create / join / end
    │   ├── submission_service.py  # SubmitRun pipeline
    │   ├── reward_service.py      # Prize distribution + claims
    │   ├── query_service.py       # Read-only lookups
    │   ├── reconciliation_service.py  # Aggregate drift checks
    │   └── dispatcher.py          # Single-threaded operation serializer
    ├── __main__.py        # python -m labyrinth
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT caller identity, engine + dispatcher
        └── routes/        # Public reads + authenticated operations
"""

__version__ = "0.1.0"
