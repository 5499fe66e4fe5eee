"""
labyrinth.services.registrar — Players, Usernames & Signer Bindings
====================================================================

Owns the ``players``, ``usernames`` and ``signer_bindings`` tables.

- ``register_player`` creates a Player or, for an existing wallet, just
  binds the calling signer to it.
- ``update_profile`` renames the caller's Player.  Username snapshots on
  runs, tournament rows and leaderboards keep the old name.
- ``resolve_wallet`` turns the caller's signer into a wallet for every
  other operation, auto-binding address-form signers when enabled.
"""

from __future__ import annotations

import logging

from labyrinth.config import LabyrinthConfig
from labyrinth.constants import DEFAULT_USERNAME_PREFIX, USERNAME_MAX_LENGTH
from labyrinth.database.models import Player
from labyrinth.engine.identity import Signer, default_username, normalize_wallet
from labyrinth.engine.operations import (
    PlayerRegistered,
    ProfileUpdated,
    RegisterPlayer,
    UpdateProfile,
)
from labyrinth.errors import InvalidInput, NotAuthenticated, NotRegistered, UsernameTaken
from labyrinth.services.store import Store

logger = logging.getLogger(__name__)


def validate_username(username: str) -> str:
    """Strip *username* and enforce 1..USERNAME_MAX_LENGTH characters."""
    if not isinstance(username, str):
        raise InvalidInput("username", "must be a string")
    name = username.strip()
    if not name:
        raise InvalidInput("username", "must not be empty")
    if len(name) > USERNAME_MAX_LENGTH:
        raise InvalidInput("username", f"longer than {USERNAME_MAX_LENGTH} characters")
    return name


def _require_signer(signer: Signer | None) -> Signer:
    if signer is None or not signer.token:
        raise NotAuthenticated()
    return signer


def _create_player(store: Store, wallet: str, username: str, now: int) -> Player:
    player = store.add(Player(
        wallet=wallet,
        username=username,
        total_xp=0,
        total_runs=0,
        tournaments_played=0,
        tournaments_won=0,
        best_time_ms=None,
        registered_at=now,
        last_active=now,
    ))
    store.index_username(username, wallet)
    return player


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def register_player(
    store: Store, signer: Signer | None, op: RegisterPlayer, now: int
) -> PlayerRegistered:
    signer = _require_signer(signer)
    wallet = normalize_wallet(op.wallet)
    username = validate_username(op.username)

    owner = store.wallet_for_username(username)
    if owner is not None and owner != wallet:
        raise UsernameTaken(username)

    if store.get_player(wallet) is None:
        _create_player(store, wallet, username, now)
        logger.info("Registered player %s as %r", wallet, username)
    else:
        logger.debug("Wallet %s already registered; binding signer only", wallet)

    store.bind_signer(signer.token, wallet, now)
    return PlayerRegistered(wallet=wallet)


def update_profile(
    store: Store, signer: Signer | None, op: UpdateProfile, now: int
) -> ProfileUpdated:
    wallet = resolve_wallet(store, signer, now, auto_bind=False)
    player = store.get_player(wallet)
    username = validate_username(op.username)

    if username != player.username:
        owner = store.wallet_for_username(username)
        if owner is not None and owner != wallet:
            raise UsernameTaken(username)
        store.unindex_username(player.username)
        store.index_username(username, wallet)
        logger.info("Player %s renamed %r → %r", wallet, player.username, username)
        player.username = username

    player.last_active = now
    store.session.flush()
    return ProfileUpdated(wallet=wallet)


# ---------------------------------------------------------------------------
# Caller resolution
# ---------------------------------------------------------------------------
def _auto_register(store: Store, wallet: str, now: int) -> Player:
    """Create a Player with the ``Player_<hex>`` default name."""
    for candidate in (default_username(wallet), f"{DEFAULT_USERNAME_PREFIX}{wallet[2:]}"):
        if store.wallet_for_username(candidate) is None:
            logger.info("Auto-registered player %s as %r", wallet, candidate)
            return _create_player(store, wallet, candidate, now)
    raise UsernameTaken(default_username(wallet))


def resolve_wallet(
    store: Store,
    signer: Signer | None,
    now: int,
    config: LabyrinthConfig | None = None,
    auto_bind: bool = True,
) -> str:
    """Wallet of the calling signer.

    Raises ``NotAuthenticated`` without a signer and ``NotRegistered`` when
    the signer is unbound and cannot be auto-bound.
    """
    signer = _require_signer(signer)
    wallet = store.wallet_for_signer(signer.token)
    if wallet is not None:
        return wallet

    auto_bind = auto_bind and (config is None or config.auto_bind_signers)
    address = signer.address
    if not auto_bind or address is None:
        raise NotRegistered(signer.token)

    if store.get_player(address) is None:
        _auto_register(store, address, now)
    store.bind_signer(signer.token, address, now)
    logger.debug("Auto-bound signer %s to %s", signer.token, address)
    return address
