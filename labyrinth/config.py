"""
labyrinth.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for soft settings: API port, the defaults used when
tournament #1 is bootstrapped, and the signer auto-bind policy.  Secrets
(``DATABASE_URL``, ``JWT_SECRET``) stay in the environment.

Usage::

    from labyrinth.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.default_duration_days) # 15
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from labyrinth.constants import (
    DEFAULT_DURATION_DAYS,
    DEFAULT_TOURNAMENT_DESCRIPTION,
    DEFAULT_TOURNAMENT_TITLE,
    DEFAULT_XP_REWARD_POOL,
)
from labyrinth.database.models import Difficulty


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LabyrinthConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # API
    api_port: int = 8000

    # Tournament #1 defaults
    default_tournament_title: str = DEFAULT_TOURNAMENT_TITLE
    default_tournament_description: str = DEFAULT_TOURNAMENT_DESCRIPTION
    default_duration_days: int = DEFAULT_DURATION_DAYS
    default_xp_reward_pool: int = DEFAULT_XP_REWARD_POOL
    default_difficulty: Difficulty = Difficulty.MEDIUM

    # Bind an unknown address-form signer to its own wallet on first submission
    auto_bind_signers: bool = True


def default_config() -> LabyrinthConfig:
    """Built-in defaults, used when no YAML file is supplied."""
    return LabyrinthConfig()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path | None = None) -> LabyrinthConfig:
    """Read *path* and return a :class:`LabyrinthConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.  Defaults to
        ``$LABYRINTH_CONFIG`` or ``config.yaml`` in the working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If the required ``api_port`` key is missing.
    ValueError
        If ``default_difficulty`` is not a known difficulty.
    """
    if path is None:
        path = os.getenv("LABYRINTH_CONFIG", "config.yaml")
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = default_config()
    return LabyrinthConfig(
        api_port=int(raw["api_port"]),
        default_tournament_title=raw.get(
            "default_tournament_title", defaults.default_tournament_title
        ),
        default_tournament_description=raw.get(
            "default_tournament_description", defaults.default_tournament_description
        ),
        default_duration_days=int(
            raw.get("default_duration_days", defaults.default_duration_days)
        ),
        default_xp_reward_pool=int(
            raw.get("default_xp_reward_pool", defaults.default_xp_reward_pool)
        ),
        default_difficulty=Difficulty(
            raw.get("default_difficulty", defaults.default_difficulty.value)
        ),
        auto_bind_signers=bool(raw.get("auto_bind_signers", defaults.auto_bind_signers)),
    )
