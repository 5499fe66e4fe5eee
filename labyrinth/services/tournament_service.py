"""
labyrinth.services.tournament_service — Tournament Lifecycle
=============================================================

Creation, the idempotent bootstrap of tournament #1, joining, and the
permissionless Active → Ended transition (which triggers prize
distribution in the same transaction).

The ``active_tournament_id`` register is a cached handle; the
tournament row's ``status`` is authoritative.
"""

from __future__ import annotations

import logging

from labyrinth.config import LabyrinthConfig, default_config
from labyrinth.constants import (
    BIGINT_MAX,
    DEFAULT_TOURNAMENT_ID,
    MAZE_SEED_PREFIX,
    MICROS_PER_DAY,
    MICROS_PER_SECOND,
)
from labyrinth.database.models import Difficulty, Tournament, TournamentPlayer, TournamentStatus
from labyrinth.engine.identity import Signer
from labyrinth.engine.operations import (
    BootstrapTournament,
    CreateTournament,
    EndTournament,
    JoinTournament,
    TournamentBootstrapped,
    TournamentCreated,
    TournamentEnded,
    TournamentJoined,
)
from labyrinth.errors import (
    AlreadyEnded,
    AlreadyJoined,
    InvalidDuration,
    InvalidTimes,
    NotYetDue,
    TournamentNotFound,
    TournamentNotStarted,
)
from labyrinth.errors import TournamentEnded as TournamentEndedError
from labyrinth.services.registrar import resolve_wallet
from labyrinth.services.reward_service import distribute_rewards
from labyrinth.services.store import Store

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def get_tournament_or_raise(store: Store, tournament_id: int) -> Tournament:
    tournament = store.get_tournament(tournament_id)
    if tournament is None:
        raise TournamentNotFound(tournament_id)
    return tournament


def ensure_accepting(tournament: Tournament, now: int) -> None:
    """Raise unless *tournament* is Active and ``start_time <= now < end_time``."""
    if not tournament.is_active or now >= tournament.end_time:
        raise TournamentEndedError(tournament.id)
    if now < tournament.start_time:
        raise TournamentNotStarted(tournament.id)


def _window(now: int, duration_days: int) -> tuple[int, int]:
    if duration_days == 0:
        raise InvalidDuration()
    end_time = now + duration_days * MICROS_PER_DAY
    if end_time <= now or end_time > BIGINT_MAX:
        raise InvalidTimes(now, end_time)
    return now, end_time


def _new_tournament(
    tournament_id: int,
    title: str,
    description: str,
    maze_seed: str,
    difficulty: Difficulty | str,
    start_time: int,
    end_time: int,
    xp_reward_pool: int,
    max_attempts_per_player: int | None,
    now: int,
) -> Tournament:
    return Tournament(
        id=tournament_id,
        title=title,
        description=description,
        maze_seed=maze_seed,
        difficulty=Difficulty(difficulty).value,
        start_time=start_time,
        end_time=end_time,
        status=TournamentStatus.ACTIVE.value,
        participant_count=0,
        total_runs=0,
        xp_reward_pool=xp_reward_pool,
        max_attempts_per_player=max_attempts_per_player,
        created_at=now,
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def bootstrap_tournament(
    store: Store,
    op: BootstrapTournament,
    now: int,
    config: LabyrinthConfig | None = None,
) -> TournamentBootstrapped:
    """Create tournament #1 on first activation; a no-op afterwards."""
    config = config or default_config()

    existing = store.get_tournament(DEFAULT_TOURNAMENT_ID)
    if existing is not None:
        if existing.is_active:
            store.set_active_tournament_id(existing.id)
        logger.debug("Tournament %d already bootstrapped", existing.id)
        return TournamentBootstrapped(
            id=existing.id, end_time=existing.end_time, already_existed=True
        )

    start_time, end_time = _window(now, config.default_duration_days)
    tournament = store.add(_new_tournament(
        DEFAULT_TOURNAMENT_ID,
        title=config.default_tournament_title,
        description=config.default_tournament_description,
        maze_seed=f"{MAZE_SEED_PREFIX}{now // MICROS_PER_SECOND}",
        difficulty=config.default_difficulty,
        start_time=start_time,
        end_time=end_time,
        xp_reward_pool=config.default_xp_reward_pool,
        max_attempts_per_player=None,
        now=now,
    ))
    store.set_next_tournament_id(DEFAULT_TOURNAMENT_ID + 1)
    store.set_next_run_id(1)
    store.set_recent_run_ids([])
    store.set_active_tournament_id(tournament.id)

    logger.info(
        "Bootstrapped tournament %d %r (seed %s, ends %d)",
        tournament.id, tournament.title, tournament.maze_seed, end_time,
    )
    return TournamentBootstrapped(id=tournament.id, end_time=end_time, already_existed=False)


def create_tournament(store: Store, op: CreateTournament, now: int) -> TournamentCreated:
    start_time, end_time = _window(now, op.duration_days)
    tournament_id = store.allocate_tournament_id()

    tournament = store.add(_new_tournament(
        tournament_id,
        title=op.title.strip(),
        description=op.description,
        maze_seed=op.maze_seed,
        difficulty=op.difficulty,
        start_time=start_time,
        end_time=end_time,
        xp_reward_pool=op.xp_reward_pool,
        max_attempts_per_player=op.max_attempts_per_player,
        now=now,
    ))

    active_id = store.get_active_tournament_id()
    active = store.get_tournament(active_id) if active_id is not None else None
    if active is None or not active.is_active:
        store.set_active_tournament_id(tournament.id)

    logger.info(
        "Created tournament %d %r (%s, pool %d, ends %d)",
        tournament.id, tournament.title, tournament.difficulty,
        tournament.xp_reward_pool, end_time,
    )
    return TournamentCreated(id=tournament.id, maze_seed=tournament.maze_seed, end_time=end_time)


def join_tournament(
    store: Store,
    signer: Signer | None,
    op: JoinTournament,
    now: int,
    config: LabyrinthConfig | None = None,
) -> TournamentJoined:
    wallet = resolve_wallet(store, signer, now, config)
    tournament = get_tournament_or_raise(store, op.tournament_id)
    ensure_accepting(tournament, now)
    if store.get_tournament_player(tournament.id, wallet) is not None:
        raise AlreadyJoined(tournament.id)

    player = store.get_player(wallet)
    store.add(TournamentPlayer(
        tournament_id=tournament.id,
        wallet=wallet,
        username=player.username,
        best_time_ms=None,
        best_score=0,
        total_runs=0,
        total_xp_earned=0,
        joined_at=now,
        last_run_at=None,
    ))
    tournament.participant_count += 1
    player.tournaments_played += 1
    player.last_active = now
    store.session.flush()

    logger.info("Player %s joined tournament %d", wallet, tournament.id)
    return TournamentJoined(
        tournament_id=tournament.id, participant_count=tournament.participant_count
    )


def end_tournament(store: Store, op: EndTournament, now: int) -> TournamentEnded:
    tournament = get_tournament_or_raise(store, op.tournament_id)
    if not tournament.is_active:
        raise AlreadyEnded(tournament.id)
    if now < tournament.end_time:
        raise NotYetDue(tournament.id, tournament.end_time)

    tournament.status = TournamentStatus.ENDED.value
    if store.get_active_tournament_id() == tournament.id:
        store.set_active_tournament_id(None)
    store.session.flush()

    rewards = distribute_rewards(store, tournament, now)
    logger.info("Ended tournament %d with %d winners", tournament.id, len(rewards))
    return TournamentEnded(id=tournament.id, winner_count=len(rewards))
