"""
labyrinth.services.dispatcher — Serialised Operation Executor
==============================================================

Single entry point for every state change.  For each operation the
dispatcher:

1. Takes the dispatcher lock (operations never interleave)
2. Reads the clock once
3. Opens one session and routes the operation to its service
4. Commits on success; on a :class:`~labyrinth.errors.LabyrinthError`
   rolls back and returns an ``ErrorResponse``

Any other exception also rolls back, then propagates.

Usage::

    dispatcher = Dispatcher(engine)
    response = dispatcher.execute(Signer("0xabc…"), SubmitRun(1, 60_000, 500, 3, 0, True))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from sqlalchemy import Engine

from labyrinth.config import LabyrinthConfig, default_config
from labyrinth.database.engine import get_session
from labyrinth.engine.clock import Clock, SystemClock
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
    Response,
    SubmitRun,
    UpdateProfile,
)
from labyrinth.errors import LabyrinthError
from labyrinth.services import registrar, reward_service, submission_service, tournament_service
from labyrinth.services.store import Store

logger = logging.getLogger(__name__)

Handler = Callable[[Store, Signer | None, Operation, int, LabyrinthConfig], Response]

_HANDLERS: dict[type, Handler] = {
    RegisterPlayer: lambda store, signer, op, now, cfg: registrar.register_player(
        store, signer, op, now
    ),
    UpdateProfile: lambda store, signer, op, now, cfg: registrar.update_profile(
        store, signer, op, now
    ),
    SubmitRun: submission_service.submit_run,
    CreateTournament: lambda store, signer, op, now, cfg: tournament_service.create_tournament(
        store, op, now
    ),
    JoinTournament: tournament_service.join_tournament,
    EndTournament: lambda store, signer, op, now, cfg: tournament_service.end_tournament(
        store, op, now
    ),
    ClaimReward: reward_service.claim_reward,
    BootstrapTournament: lambda store, signer, op, now, cfg: tournament_service.bootstrap_tournament(
        store, op, now, cfg
    ),
}


class Dispatcher:
    """Runs operations one at a time, each in its own transaction."""

    def __init__(
        self,
        engine: Engine,
        clock: Clock | None = None,
        config: LabyrinthConfig | None = None,
    ) -> None:
        self.engine = engine
        self.clock = clock or SystemClock()
        self.config = config or default_config()
        self._lock = threading.Lock()

    def execute(self, signer: Signer | str | None, operation: Operation) -> Response:
        handler = _HANDLERS.get(type(operation))
        if handler is None:
            raise TypeError(f"Unknown operation type: {type(operation).__name__}")
        if isinstance(signer, str):
            signer = Signer(signer)

        name = type(operation).__name__
        with self._lock:
            now = self.clock.now_micros()
            try:
                with get_session(self.engine) as session:
                    response = handler(Store(session), signer, operation, now, self.config)
            except LabyrinthError as exc:
                logger.warning("%s rejected (%s): %s", name, exc.kind, exc)
                return ErrorResponse(kind=exc.kind, message=exc.user_message)
            except Exception:
                logger.exception("%s failed; transaction rolled back", name)
                raise

        logger.debug("%s → %s", name, response)
        return response

    def bootstrap(self) -> Response:
        """Create tournament #1 if needed; safe to call on every start."""
        return self.execute(None, BootstrapTournament())
