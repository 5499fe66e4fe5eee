"""
labyrinth.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- registers           — Singleton values (id counters, active tournament, recent runs)
- tournaments         — Contest configuration and running totals
- players             — Global cross-tournament profile keyed by wallet
- usernames           — Username → wallet uniqueness index
- signer_bindings     — Transport signer token → wallet
- tournament_players  — Per-tournament per-player aggregate
- game_runs           — Append-only submission journal
- leaderboard_entries — Ranked top-K projection of tournament_players
- tournament_rewards  — Prize records written when a tournament ends

All timestamps are integer microseconds supplied by the operation clock,
never server defaults, so replaying the same operations reproduces the
same rows.
"""

from __future__ import annotations

import enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Labyrinth ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Difficulty(enum.StrEnum):
    """Maze difficulty; selects the base XP of every run."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    NIGHTMARE = "Nightmare"


class TournamentStatus(enum.StrEnum):
    """Tournament lifecycle.  Only ACTIVE → ENDED is allowed."""
    ACTIVE = "Active"
    ENDED = "Ended"


# ---------------------------------------------------------------------------
# Register — singleton key/value slots
# ---------------------------------------------------------------------------
class Register(Base):
    """Single-value slot.  Values are JSON; typed accessors live in
    :class:`~labyrinth.services.store.Store`.
    """
    __tablename__ = "registers"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Register key={self.key!r}>"


# ---------------------------------------------------------------------------
# Tournament
# ---------------------------------------------------------------------------
class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    maze_seed: Mapped[str] = mapped_column(String(200), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=TournamentStatus.ACTIVE.value
    )
    participant_count: Mapped[int] = mapped_column(Integer, default=0)
    total_runs: Mapped[int] = mapped_column(BigInteger, default=0)
    xp_reward_pool: Mapped[int] = mapped_column(BigInteger, default=0)
    max_attempts_per_player: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_tournaments_status", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == TournamentStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<Tournament id={self.id} title={self.title!r} status={self.status}>"


# ---------------------------------------------------------------------------
# Player — one row per wallet
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    wallet: Mapped[str] = mapped_column(String(42), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    total_xp: Mapped[int] = mapped_column(BigInteger, default=0)
    total_runs: Mapped[int] = mapped_column(BigInteger, default=0)
    tournaments_played: Mapped[int] = mapped_column(Integer, default=0)
    tournaments_won: Mapped[int] = mapped_column(Integer, default=0)
    best_time_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_active: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_players_total_xp", "total_xp"),
    )

    def __repr__(self) -> str:
        return f"<Player wallet={self.wallet} name={self.username!r} xp={self.total_xp}>"


# ---------------------------------------------------------------------------
# UsernameIndex — username → wallet
# ---------------------------------------------------------------------------
class UsernameIndex(Base):
    __tablename__ = "usernames"

    username: Mapped[str] = mapped_column(String(100), primary_key=True)
    wallet: Mapped[str] = mapped_column(
        String(42), ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False
    )

    def __repr__(self) -> str:
        return f"<UsernameIndex {self.username!r} → {self.wallet}>"


# ---------------------------------------------------------------------------
# SignerBinding — transport identity → wallet
# ---------------------------------------------------------------------------
class SignerBinding(Base):
    __tablename__ = "signer_bindings"

    signer: Mapped[str] = mapped_column(String(128), primary_key=True)
    wallet: Mapped[str] = mapped_column(
        String(42), ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False
    )
    bound_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_signer_bindings_wallet", "wallet"),
    )

    def __repr__(self) -> str:
        return f"<SignerBinding {self.signer!r} → {self.wallet}>"


# ---------------------------------------------------------------------------
# TournamentPlayer — per-tournament per-player aggregate
# ---------------------------------------------------------------------------
class TournamentPlayer(Base):
    """Running totals for one wallet inside one tournament.

    ``best_time_ms`` is ``None`` until the first completed run (lower is
    better).  ``username`` is a snapshot taken when the row was created.
    """
    __tablename__ = "tournament_players"

    tournament_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True
    )
    wallet: Mapped[str] = mapped_column(
        String(42), ForeignKey("players.wallet", ondelete="CASCADE"), primary_key=True
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    best_time_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    best_score: Mapped[int] = mapped_column(BigInteger, default=0)
    total_runs: Mapped[int] = mapped_column(Integer, default=0)
    total_xp_earned: Mapped[int] = mapped_column(BigInteger, default=0)
    joined_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_run_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TournamentPlayer tournament={self.tournament_id} "
            f"wallet={self.wallet} best={self.best_time_ms}>"
        )


# ---------------------------------------------------------------------------
# GameRun — append-only submission journal
# ---------------------------------------------------------------------------
class GameRun(Base):
    __tablename__ = "game_runs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    tournament_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    wallet: Mapped[str] = mapped_column(
        String(42), ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    time_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    score: Mapped[int] = mapped_column(BigInteger, default=0)
    coins: Mapped[int] = mapped_column(BigInteger, default=0)
    deaths: Mapped[int] = mapped_column(BigInteger, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    xp_earned: Mapped[int] = mapped_column(BigInteger, default=0)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_game_runs_tournament", "tournament_id"),
        Index("ix_game_runs_wallet_id", "wallet", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<GameRun id={self.id} tournament={self.tournament_id} "
            f"wallet={self.wallet} time={self.time_ms}>"
        )


# ---------------------------------------------------------------------------
# LeaderboardEntry — ranked projection, at most LEADERBOARD_SIZE per tournament
# ---------------------------------------------------------------------------
class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"

    tournament_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True
    )
    wallet: Mapped[str] = mapped_column(String(42), primary_key=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    best_time_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    best_score: Mapped[int] = mapped_column(BigInteger, default=0)
    total_runs: Mapped[int] = mapped_column(Integer, default=0)
    total_xp: Mapped[int] = mapped_column(BigInteger, default=0)

    __table_args__ = (
        Index("ix_leaderboard_entries_rank", "tournament_id", "rank"),
    )

    def __repr__(self) -> str:
        return (
            f"<LeaderboardEntry tournament={self.tournament_id} "
            f"rank={self.rank} wallet={self.wallet}>"
        )


# ---------------------------------------------------------------------------
# TournamentReward — prize record, claimed flag flips once
# ---------------------------------------------------------------------------
class TournamentReward(Base):
    __tablename__ = "tournament_rewards"

    tournament_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True
    )
    wallet: Mapped[str] = mapped_column(
        String(42), ForeignKey("players.wallet", ondelete="CASCADE"), primary_key=True
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    xp_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    claimed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    claimed_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TournamentReward tournament={self.tournament_id} "
            f"wallet={self.wallet} rank={self.rank} claimed={self.claimed}>"
        )
