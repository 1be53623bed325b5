"""
staking.py - Stake lock queries

Pure functions over a TokenView that answer "can this account unstake yet?":
1. unlock_height() - First block height at which the position may be unstaked
2. blocks_until_unlock() - Remaining blocks of the lock, never negative
3. is_unlocked() - Whether the lock period has elapsed
4. get_stake_position() - Snapshot of an account's stake

Lock model:
    Every stake() overwrites the account's staking timestamp with the current
    block height, so adding to a position relocks all of it. unstake() leaves
    the timestamp alone, so a partially unstaked position stays unlocked.

    staked at h, lock period L:
        h .. h+L-1   locked
        h+L ..       unlocked
"""

from __future__ import annotations
from dataclasses import dataclass

from .core import TokenView


@dataclass(frozen=True, slots=True)
class StakePosition:
    """
    Read-only snapshot of one account's stake.

    Attributes:
        account: Account ID
        staked: Staked amount
        staked_at: Block height of the last stake (0 if never staked)
        unlock_height: First block height at which unstake is allowed
        unlocked: Whether unstake is allowed at the view's current height
    """
    account: str
    staked: int
    staked_at: int
    unlock_height: int
    unlocked: bool


def unlock_height(view: TokenView, account: str) -> int:
    """Return the first block height at which the account may unstake."""
    return view.get_staking_timestamp(account) + view.lock_period


def blocks_until_unlock(view: TokenView, account: str) -> int:
    """Return how many more blocks must pass before unstake is allowed (0 if none)."""
    return max(0, unlock_height(view, account) - view.block_height)


def is_unlocked(view: TokenView, account: str) -> bool:
    """
    Return True if the lock period has elapsed for the account's stake.

    The check is on elapsed blocks: block_height - staked_at >= lock_period.
    """
    elapsed = view.block_height - view.get_staking_timestamp(account)
    return elapsed >= view.lock_period


def get_stake_position(view: TokenView, account: str) -> StakePosition:
    return StakePosition(
        account=account,
        staked=view.get_staked_balance(account),
        staked_at=view.get_staking_timestamp(account),
        unlock_height=unlock_height(view, account),
        unlocked=is_unlocked(view, account),
    )
