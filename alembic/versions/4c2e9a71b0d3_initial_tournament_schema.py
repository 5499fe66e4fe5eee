"""Initial tournament schema

Revision ID: 4c2e9a71b0d3
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4c2e9a71b0d3'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create registers, tournaments, players and every per-tournament table."""

    # --- registers ---
    op.create_table(
        "registers",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("value_json", sa.Text, nullable=False),
    )

    # --- tournaments ---
    op.create_table(
        "tournaments",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("maze_seed", sa.String(200), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False),
        sa.Column("start_time", sa.BigInteger, nullable=False),
        sa.Column("end_time", sa.BigInteger, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("participant_count", sa.Integer, nullable=True),
        sa.Column("total_runs", sa.BigInteger, nullable=True),
        sa.Column("xp_reward_pool", sa.BigInteger, nullable=True),
        sa.Column("max_attempts_per_player", sa.Integer, nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_tournaments_status", "tournaments", ["status"])

    # --- players ---
    op.create_table(
        "players",
        sa.Column("wallet", sa.String(42), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("total_xp", sa.BigInteger, nullable=True),
        sa.Column("total_runs", sa.BigInteger, nullable=True),
        sa.Column("tournaments_played", sa.Integer, nullable=True),
        sa.Column("tournaments_won", sa.Integer, nullable=True),
        sa.Column("best_time_ms", sa.BigInteger, nullable=True),
        sa.Column("registered_at", sa.BigInteger, nullable=False),
        sa.Column("last_active", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_players_total_xp", "players", ["total_xp"])

    # --- usernames ---
    op.create_table(
        "usernames",
        sa.Column("username", sa.String(100), primary_key=True),
        sa.Column(
            "wallet", sa.String(42),
            sa.ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False,
        ),
    )

    # --- signer_bindings ---
    op.create_table(
        "signer_bindings",
        sa.Column("signer", sa.String(128), primary_key=True),
        sa.Column(
            "wallet", sa.String(42),
            sa.ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("bound_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_signer_bindings_wallet", "signer_bindings", ["wallet"])

    # --- tournament_players ---
    op.create_table(
        "tournament_players",
        sa.Column(
            "tournament_id", sa.BigInteger,
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "wallet", sa.String(42),
            sa.ForeignKey("players.wallet", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("best_time_ms", sa.BigInteger, nullable=True),
        sa.Column("best_score", sa.BigInteger, nullable=True),
        sa.Column("total_runs", sa.Integer, nullable=True),
        sa.Column("total_xp_earned", sa.BigInteger, nullable=True),
        sa.Column("joined_at", sa.BigInteger, nullable=False),
        sa.Column("last_run_at", sa.BigInteger, nullable=True),
    )

    # --- game_runs ---
    op.create_table(
        "game_runs",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column(
            "tournament_id", sa.BigInteger,
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "wallet", sa.String(42),
            sa.ForeignKey("players.wallet", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("time_ms", sa.BigInteger, nullable=False),
        sa.Column("score", sa.BigInteger, nullable=True),
        sa.Column("coins", sa.BigInteger, nullable=True),
        sa.Column("deaths", sa.BigInteger, nullable=True),
        sa.Column("completed", sa.Boolean, nullable=True),
        sa.Column("xp_earned", sa.BigInteger, nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_game_runs_tournament", "game_runs", ["tournament_id"])
    op.create_index("ix_game_runs_wallet_id", "game_runs", ["wallet", "id"])

    # --- leaderboard_entries ---
    op.create_table(
        "leaderboard_entries",
        sa.Column(
            "tournament_id", sa.BigInteger,
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("wallet", sa.String(42), primary_key=True),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("best_time_ms", sa.BigInteger, nullable=False),
        sa.Column("best_score", sa.BigInteger, nullable=True),
        sa.Column("total_runs", sa.Integer, nullable=True),
        sa.Column("total_xp", sa.BigInteger, nullable=True),
    )
    op.create_index(
        "ix_leaderboard_entries_rank", "leaderboard_entries", ["tournament_id", "rank"]
    )

    # --- tournament_rewards ---
    op.create_table(
        "tournament_rewards",
        sa.Column(
            "tournament_id", sa.BigInteger,
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "wallet", sa.String(42),
            sa.ForeignKey("players.wallet", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.Column("xp_amount", sa.BigInteger, nullable=False),
        sa.Column("claimed", sa.Boolean, nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("claimed_at", sa.BigInteger, nullable=True),
    )


def downgrade() -> None:
    """Drop every tournament table."""
    op.drop_table("tournament_rewards")
    op.drop_index("ix_leaderboard_entries_rank", table_name="leaderboard_entries")
    op.drop_table("leaderboard_entries")
    op.drop_index("ix_game_runs_wallet_id", table_name="game_runs")
    op.drop_index("ix_game_runs_tournament", table_name="game_runs")
    op.drop_table("game_runs")
    op.drop_table("tournament_players")
    op.drop_index("ix_signer_bindings_wallet", table_name="signer_bindings")
    op.drop_table("signer_bindings")
    op.drop_table("usernames")
    op.drop_index("ix_players_total_xp", table_name="players")
    op.drop_table("players")
    op.drop_index("ix_tournaments_status", table_name="tournaments")
    op.drop_table("tournaments")
    op.drop_table("registers")
