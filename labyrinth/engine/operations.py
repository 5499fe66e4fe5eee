"""
labyrinth.engine.operations — Operation & Response Envelopes
=============================================================

Every state change enters the system as one of the operation dataclasses
below and leaves as one of the responses.  The dispatcher routes on the
operation type.  Payload field widths are checked on construction, so a
malformed operation never reaches a service.
"""

from __future__ import annotations

from dataclasses import dataclass

from labyrinth.constants import BIGINT_MAX, U32_MAX
from labyrinth.database.models import Difficulty
from labyrinth.errors import InvalidInput

__all__ = [
    "BootstrapTournament",
    "ClaimReward",
    "CreateTournament",
    "EndTournament",
    "ErrorResponse",
    "JoinTournament",
    "OkResponse",
    "Operation",
    "PlayerRegistered",
    "ProfileUpdated",
    "RegisterPlayer",
    "Response",
    "RewardClaimed",
    "RunSubmitted",
    "SubmitRun",
    "TournamentBootstrapped",
    "TournamentCreated",
    "TournamentEnded",
    "TournamentJoined",
    "UpdateProfile",
]


def _require_uint(name: str, value: object, maximum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(name, f"expected an integer, got {type(value).__name__}")
    if not 0 <= value <= maximum:
        raise InvalidInput(name, f"{value} is outside 0..{maximum}")


def _require_bool(name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise InvalidInput(name, f"expected a boolean, got {type(value).__name__}")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RegisterPlayer:
    wallet: str | bytes
    username: str


@dataclass(frozen=True, slots=True)
class UpdateProfile:
    username: str


@dataclass(frozen=True, slots=True)
class SubmitRun:
    tournament_id: int
    time_ms: int
    score: int
    coins: int
    deaths: int
    completed: bool

    def __post_init__(self) -> None:
        _require_uint("tournament_id", self.tournament_id, BIGINT_MAX)
        _require_uint("time_ms", self.time_ms, BIGINT_MAX)
        _require_uint("score", self.score, BIGINT_MAX)
        _require_uint("coins", self.coins, U32_MAX)
        _require_uint("deaths", self.deaths, U32_MAX)
        _require_bool("completed", self.completed)


@dataclass(frozen=True, slots=True)
class CreateTournament:
    title: str
    description: str
    maze_seed: str
    difficulty: Difficulty | str
    duration_days: int
    xp_reward_pool: int
    max_attempts_per_player: int | None = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise InvalidInput("title", "must not be empty")
        try:
            Difficulty(self.difficulty)
        except ValueError:
            raise InvalidInput("difficulty", f"unknown difficulty {self.difficulty!r}")
        _require_uint("duration_days", self.duration_days, BIGINT_MAX)
        _require_uint("xp_reward_pool", self.xp_reward_pool, BIGINT_MAX)
        if self.max_attempts_per_player is not None:
            _require_uint("max_attempts_per_player", self.max_attempts_per_player, U32_MAX)


@dataclass(frozen=True, slots=True)
class JoinTournament:
    tournament_id: int

    def __post_init__(self) -> None:
        _require_uint("tournament_id", self.tournament_id, BIGINT_MAX)


@dataclass(frozen=True, slots=True)
class EndTournament:
    tournament_id: int

    def __post_init__(self) -> None:
        _require_uint("tournament_id", self.tournament_id, BIGINT_MAX)


@dataclass(frozen=True, slots=True)
class ClaimReward:
    tournament_id: int

    def __post_init__(self) -> None:
        _require_uint("tournament_id", self.tournament_id, BIGINT_MAX)


@dataclass(frozen=True, slots=True)
class BootstrapTournament:
    pass


Operation = (
    RegisterPlayer
    | UpdateProfile
    | SubmitRun
    | CreateTournament
    | JoinTournament
    | EndTournament
    | ClaimReward
    | BootstrapTournament
)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class OkResponse:
    pass


@dataclass(frozen=True, slots=True)
class PlayerRegistered:
    wallet: str


@dataclass(frozen=True, slots=True)
class ProfileUpdated:
    wallet: str


@dataclass(frozen=True, slots=True)
class RunSubmitted:
    run_id: int
    xp_earned: int
    new_best: bool
    rank: int


@dataclass(frozen=True, slots=True)
class TournamentCreated:
    id: int
    maze_seed: str
    end_time: int


@dataclass(frozen=True, slots=True)
class TournamentJoined:
    tournament_id: int
    participant_count: int


@dataclass(frozen=True, slots=True)
class TournamentEnded:
    id: int
    winner_count: int


@dataclass(frozen=True, slots=True)
class RewardClaimed:
    tournament_id: int
    xp_amount: int


@dataclass(frozen=True, slots=True)
class TournamentBootstrapped:
    id: int
    end_time: int
    already_existed: bool


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    kind: str
    message: str


Response = (
    OkResponse
    | PlayerRegistered
    | ProfileUpdated
    | RunSubmitted
    | TournamentCreated
    | TournamentJoined
    | TournamentEnded
    | RewardClaimed
    | TournamentBootstrapped
    | ErrorResponse
)
