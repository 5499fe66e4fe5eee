"""
labyrinth.api.routes.operations — State-changing endpoints
============================================================

Each route builds one operation, hands it to the dispatcher on a worker
thread, and maps an ``ErrorResponse`` onto an HTTP status.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, Field

from labyrinth.api.deps import get_dispatcher, get_signer
from labyrinth.constants import BIGINT_MAX
from labyrinth.database.engine import run_db
from labyrinth.database.models import Difficulty
from labyrinth.engine.identity import Signer
from labyrinth.engine.operations import (
    BootstrapTournament,
    ClaimReward,
    CreateTournament,
    EndTournament,
    ErrorResponse,
    JoinTournament,
    Operation,
    RegisterPlayer,
    SubmitRun,
    UpdateProfile,
)
from labyrinth.errors import LabyrinthError
from labyrinth.services.dispatcher import Dispatcher

router = APIRouter(tags=["operations"])

TournamentId = Annotated[int, Path(ge=0, le=BIGINT_MAX)]

ERROR_STATUS: dict[str, int] = {
    "NotAuthenticated": status.HTTP_401_UNAUTHORIZED,
    "NotRegistered": status.HTTP_403_FORBIDDEN,
    "TournamentNotFound": status.HTTP_404_NOT_FOUND,
    "NoReward": status.HTTP_404_NOT_FOUND,
    "UsernameTaken": status.HTTP_409_CONFLICT,
    "TournamentNotActive": status.HTTP_409_CONFLICT,
    "TournamentEnded": status.HTTP_409_CONFLICT,
    "TournamentNotStarted": status.HTTP_409_CONFLICT,
    "NotYetDue": status.HTTP_409_CONFLICT,
    "AlreadyEnded": status.HTTP_409_CONFLICT,
    "AlreadyJoined": status.HTTP_409_CONFLICT,
    "AlreadyClaimed": status.HTTP_409_CONFLICT,
    "MaxAttemptsReached": status.HTTP_409_CONFLICT,
    "InvalidInput": 422,
    "InvalidDuration": 422,
    "InvalidTimes": 422,
}


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class PlayerRegister(BaseModel):
    wallet: str
    username: str


class ProfileUpdate(BaseModel):
    username: str


class RunSubmit(BaseModel):
    time_ms: int = Field(ge=0)
    score: int = Field(0, ge=0)
    coins: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    completed: bool


class TournamentCreate(BaseModel):
    title: str
    description: str = ""
    maze_seed: str
    difficulty: Difficulty = Difficulty.MEDIUM
    duration_days: int = Field(ge=0)
    xp_reward_pool: int = Field(0, ge=0)
    max_attempts_per_player: int | None = Field(None, ge=0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _build(factory, *args, **kwargs) -> Operation:
    """Construct an operation, turning payload errors into HTTP errors."""
    try:
        return factory(*args, **kwargs)
    except LabyrinthError as exc:
        raise HTTPException(
            ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST),
            {"kind": exc.kind, "message": exc.user_message},
        )


async def _execute(dispatcher: Dispatcher, signer: Signer | None, operation: Operation) -> dict:
    response = await run_db(dispatcher.execute, signer, operation)
    if isinstance(response, ErrorResponse):
        raise HTTPException(
            ERROR_STATUS.get(response.kind, status.HTTP_400_BAD_REQUEST),
            {"kind": response.kind, "message": response.message},
        )
    return {"type": type(response).__name__, **asdict(response)}


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
@router.post("/players", status_code=201)
async def register_player(
    body: PlayerRegister,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, _build(RegisterPlayer, body.wallet, body.username))


@router.patch("/players/me")
async def update_profile(
    body: ProfileUpdate,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, _build(UpdateProfile, body.username))


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------
@router.post("/tournaments", status_code=201)
async def create_tournament(
    body: TournamentCreate,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    operation = _build(
        CreateTournament,
        title=body.title,
        description=body.description,
        maze_seed=body.maze_seed,
        difficulty=body.difficulty,
        duration_days=body.duration_days,
        xp_reward_pool=body.xp_reward_pool,
        max_attempts_per_player=body.max_attempts_per_player,
    )
    return await _execute(dispatcher, signer, operation)


@router.post("/tournaments/bootstrap")
async def bootstrap_tournament(
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, BootstrapTournament())


@router.post("/tournaments/{tournament_id}/join")
async def join_tournament(
    tournament_id: TournamentId,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, _build(JoinTournament, tournament_id))


@router.post("/tournaments/{tournament_id}/runs", status_code=201)
async def submit_run(
    tournament_id: TournamentId,
    body: RunSubmit,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    operation = _build(
        SubmitRun,
        tournament_id=tournament_id,
        time_ms=body.time_ms,
        score=body.score,
        coins=body.coins,
        deaths=body.deaths,
        completed=body.completed,
    )
    return await _execute(dispatcher, signer, operation)


@router.post("/tournaments/{tournament_id}/end")
async def end_tournament(
    tournament_id: TournamentId,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, _build(EndTournament, tournament_id))


@router.post("/tournaments/{tournament_id}/claim")
async def claim_reward(
    tournament_id: TournamentId,
    signer: Signer | None = Depends(get_signer),
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    return await _execute(dispatcher, signer, _build(ClaimReward, tournament_id))
