"""
labyrinth.services.reward_service — Prize Distribution & Claims
================================================================

``distribute_rewards`` runs inside EndTournament: it reads the frozen
leaderboard, writes one TournamentReward per prize, and credits each
winner's XP straight away.  ``claim_reward`` only flips the claimed flag.
"""

from __future__ import annotations

import logging

from labyrinth.config import LabyrinthConfig
from labyrinth.database.models import Tournament, TournamentReward
from labyrinth.engine.identity import Signer
from labyrinth.engine.operations import ClaimReward, RewardClaimed
from labyrinth.engine.prizes import compute_prize_shares, undistributed_remainder
from labyrinth.errors import AlreadyClaimed, NoReward
from labyrinth.services.registrar import resolve_wallet
from labyrinth.services.store import Store

logger = logging.getLogger(__name__)


def distribute_rewards(store: Store, tournament: Tournament, now: int) -> list[TournamentReward]:
    """Award the top ranks of *tournament* their share of the pool.

    Rank 1 also counts as a tournament win.  Returns the new reward rows.
    """
    leaderboard = store.load_leaderboard(tournament.id)
    shares = compute_prize_shares(leaderboard, tournament.xp_reward_pool)

    rewards = []
    for share in shares:
        reward = store.add(TournamentReward(
            tournament_id=tournament.id,
            wallet=share.wallet,
            rank=share.rank,
            xp_amount=share.xp_amount,
            claimed=False,
            created_at=now,
            claimed_at=None,
        ))
        player = store.get_player(share.wallet)
        player.total_xp += share.xp_amount
        if share.rank == 1:
            player.tournaments_won += 1
        rewards.append(reward)
        logger.debug(
            "Tournament %d rank %d: %s +%d XP",
            tournament.id, share.rank, share.wallet, share.xp_amount,
        )

    store.session.flush()
    logger.info(
        "Distributed %d rewards for tournament %d (%d XP undistributed)",
        len(rewards), tournament.id,
        undistributed_remainder(shares, tournament.xp_reward_pool),
    )
    return rewards


def claim_reward(
    store: Store,
    signer: Signer | None,
    op: ClaimReward,
    now: int,
    config: LabyrinthConfig | None = None,
) -> RewardClaimed:
    wallet = resolve_wallet(store, signer, now, config)
    reward = store.get_reward(op.tournament_id, wallet)
    if reward is None:
        raise NoReward(op.tournament_id)
    if reward.claimed:
        raise AlreadyClaimed(op.tournament_id)

    reward.claimed = True
    reward.claimed_at = now
    store.session.flush()
    logger.info(
        "Reward claimed: tournament %d, %s, %d XP",
        op.tournament_id, wallet, reward.xp_amount,
    )
    return RewardClaimed(tournament_id=op.tournament_id, xp_amount=reward.xp_amount)
