"""
labyrinth.constants — Shared Constants
=======================================

Single source of truth for the game economy and bounded collections.
Import from here instead of duplicating in engine, services, and API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Bounded collections
# ---------------------------------------------------------------------------
LEADERBOARD_SIZE = 100
RECENT_RUNS_LIMIT = 100

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------
MICROS_PER_SECOND = 1_000_000
MICROS_PER_DAY = 86_400 * MICROS_PER_SECOND

# ---------------------------------------------------------------------------
# XP formula
# ---------------------------------------------------------------------------
MIN_RUN_XP = 10
TIME_BONUS_WINDOW_SECS = 120
DEATH_PENALTY_PER_DEATH = 10  # percent
MAX_DEATH_PENALTY = 50  # percent

# ---------------------------------------------------------------------------
# Prize distribution — percent of pool for ranks 1..5
# ---------------------------------------------------------------------------
PRIZE_SPLIT: tuple[int, ...] = (40, 25, 15, 12, 8)

# ---------------------------------------------------------------------------
# Default tournament (#1, created on first activation)
# ---------------------------------------------------------------------------
DEFAULT_TOURNAMENT_ID = 1
DEFAULT_TOURNAMENT_TITLE = "Default Championship"
DEFAULT_TOURNAMENT_DESCRIPTION = "The 15-day Labyrinth Legends championship."
DEFAULT_DURATION_DAYS = 15
DEFAULT_XP_REWARD_POOL = 10_000
MAZE_SEED_PREFIX = "labyrinth_legends_"

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
WALLET_BYTES = 20
USERNAME_MAX_LENGTH = 32
DEFAULT_USERNAME_PREFIX = "Player_"

# Field widths for operation payloads
U32_MAX = 2**32 - 1
# Unsigned 64-bit payloads are stored in signed BIGINT columns
BIGINT_MAX = 2**63 - 1
