"""
token_ledger - Capped-Supply Token Ledger with Staking

A fungible-token ledger tracking liquid balances, allowances and time-locked
stakes, with every operation validated and applied all-or-nothing.

Usage:
    from token_ledger import TokenLedger, ErrorCode

    ledger = TokenLedger("admin", initial_block_height=100, verbose=False)
    ledger.mint("admin", "alice", 1000)
    ledger.transfer("alice", "bob", 200)
    ledger.approve("alice", "carol", 300)
    ledger.transfer_from("carol", "alice", "bob", 100)

    ledger.stake("alice", 200)
    result = ledger.unstake("alice", 100)
    assert result.error == ErrorCode.STAKE_LOCKED

    ledger.advance_blocks(10)
    assert ledger.unstake("alice", 100).ok
"""

# Core types
from .core import (
    TokenView,
    AllowanceKey,
    BalanceDelta,
    PendingChange,
    OpResult,
    OperationRecord,
    Outcome,
    ErrorCode,
    OperationType,
    Book,
    LedgerError,
    InvariantViolation,
    ReplayError,
    MAX_SUPPLY,
    LOCK_PERIOD,
    DEFAULT_BLOCK_HEIGHT,
)

# Ledger
from .ledger import TokenLedger

# Pure operations
from .operations import (
    is_admin,
    compute_set_paused,
    compute_mint,
    compute_burn,
    compute_transfer,
    compute_approve,
    compute_transfer_from,
    compute_stake,
    compute_unstake,
)

# Staking queries
from .staking import (
    StakePosition,
    unlock_height,
    blocks_until_unlock,
    is_unlocked,
    get_stake_position,
)

__all__ = [
    # Core
    'TokenView', 'AllowanceKey', 'BalanceDelta', 'PendingChange', 'OpResult',
    'OperationRecord', 'Outcome', 'ErrorCode', 'OperationType', 'Book',
    'LedgerError', 'InvariantViolation', 'ReplayError',
    'MAX_SUPPLY', 'LOCK_PERIOD', 'DEFAULT_BLOCK_HEIGHT',
    # Ledger
    'TokenLedger',
    # Operations
    'is_admin', 'compute_set_paused', 'compute_mint', 'compute_burn',
    'compute_transfer', 'compute_approve', 'compute_transfer_from',
    'compute_stake', 'compute_unstake',
    # Staking
    'StakePosition', 'unlock_height', 'blocks_until_unlock', 'is_unlocked',
    'get_stake_position',
]

__version__ = '1.0.0'
