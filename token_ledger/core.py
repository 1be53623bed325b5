"""
Core types and pure helpers for the token ledger.

This module provides the foundational data structures and protocols:
1. Protocols: TokenView for read-only ledger access
2. Immutable data structures: AllowanceKey, BalanceDelta, PendingChange, OpResult, OperationRecord
3. Exceptions: LedgerError and its subclasses
4. Enums: ErrorCode, OperationType, Book
5. Input guards shared by the operation functions
6. Canonical serialization for state digests

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntEnum
import hashlib
from typing import (
    Any, Dict, Optional, Protocol, Tuple, Union, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Hard cap on total supply (liquid + staked) for a ledger's lifetime.
MAX_SUPPLY = 100_000_000_000_000

# Minimum number of blocks between a stake and any unstake of that position.
LOCK_PERIOD = 10

# Block height a fresh ledger starts at unless told otherwise.
DEFAULT_BLOCK_HEIGHT = 0


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from account ID to an amount held in one book.
Balances = Dict[str, int]


# ============================================================================
# ENUMS
# ============================================================================

class ErrorCode(IntEnum):
    """
    Numeric failure codes returned by mutating operations.

    Codes 105 and 108 are reserved and deliberately unassigned.
    """
    UNAUTHORIZED = 100
    INSUFFICIENT_BALANCE = 101
    INSUFFICIENT_STAKE = 102
    SUPPLY_CAP_EXCEEDED = 103
    CONTRACT_PAUSED = 104
    INVALID_AMOUNT = 106
    ALLOWANCE_EXCEEDED = 107
    STAKE_LOCKED = 109


class OperationType(Enum):
    """
    The fixed set of mutating operations.

    Values match the TokenLedger method names, which lets replay dispatch
    a logged operation back onto a ledger.
    """
    SET_PAUSED = "set_paused"
    MINT = "mint"
    BURN = "burn"
    TRANSFER = "transfer"
    APPROVE = "approve"
    TRANSFER_FROM = "transfer_from"
    STAKE = "stake"
    UNSTAKE = "unstake"


class Book(Enum):
    """Which balance map a delta applies to."""
    LIQUID = "liquid"
    STAKED = "staked"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InvariantViolation(LedgerError):
    """Raised when committing a change would break a balance or supply invariant."""
    pass


class ReplayError(LedgerError):
    """Raised when a logged operation is rejected while replaying the log."""
    pass


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TokenView(Protocol):
    """
    Read-only interface to token ledger state.

    The operation functions in operations.py and the stake queries in
    staking.py accept a TokenView and never mutate it. TokenLedger implements
    this protocol; tests use FakeView.
    """

    @property
    def admin(self) -> str:
        """Account allowed to mint and toggle the pause flag."""
        ...

    @property
    def paused(self) -> bool:
        ...

    @property
    def total_supply(self) -> int:
        ...

    @property
    def max_supply(self) -> int:
        ...

    @property
    def lock_period(self) -> int:
        ...

    @property
    def block_height(self) -> int:
        """Current block height supplied by the environment."""
        ...

    def get_balance(self, account: str) -> int:
        """Liquid balance of an account, 0 if unknown."""
        ...

    def get_staked_balance(self, account: str) -> int:
        """Staked balance of an account, 0 if unknown."""
        ...

    def get_allowance(self, owner: str, spender: str) -> int:
        """Amount spender may still move out of owner's balance, 0 if unset."""
        ...

    def get_staking_timestamp(self, account: str) -> int:
        """Block height of the account's last stake, 0 if never staked."""
        ...


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class AllowanceKey:
    """
    Composite key for the allowance map.

    Ordered: (alice, bob) and (bob, alice) are different allowances.
    """
    owner: str
    spender: str

    def __repr__(self) -> str:
        return f"AllowanceKey({self.owner}→{self.spender})"


@dataclass(frozen=True, slots=True)
class BalanceDelta:
    """
    A signed change to one account's balance in one book.

    Attributes:
        account: Account whose balance changes.
        book: LIQUID or STAKED.
        delta: Signed amount; negative debits, positive credits.
    """
    account: str
    book: Book
    delta: int

    def __repr__(self) -> str:
        sign = "+" if self.delta >= 0 else ""
        return f"Δ({self.account}.{self.book.value} {sign}{self.delta})"


@dataclass(frozen=True, slots=True)
class PendingChange:
    """
    The full effect of one operation before it is committed - represents INTENT.

    Created by the compute_* functions and committed by TokenLedger.
    Deltas are applied in order, so a self-transfer is a debit followed by
    a credit on the same account.

    Attributes:
        operation: Which operation produced this change
        value: Success payload returned to the caller
        deltas: Ordered balance changes across both books
        supply_delta: Change in total supply; must equal the sum of deltas
        allowance_updates: (key, new_amount) pairs that overwrite allowances
        timestamp_updates: (account, block_height) pairs that overwrite staking timestamps
        paused: New pause flag, or None to leave it unchanged
    """
    operation: OperationType
    value: Any = True
    deltas: Tuple[BalanceDelta, ...] = ()
    supply_delta: int = 0
    allowance_updates: Tuple[Tuple[AllowanceKey, int], ...] = ()
    timestamp_updates: Tuple[Tuple[str, int], ...] = ()
    paused: Optional[bool] = None

    def __post_init__(self):
        net = sum(d.delta for d in self.deltas)
        if net != self.supply_delta:
            raise ValueError(
                f"{self.operation.value}: deltas sum to {net} but supply_delta is {self.supply_delta}"
            )
        for key, amount in self.allowance_updates:
            if amount < 0:
                raise ValueError(f"Allowance for {key!r} cannot be negative: {amount}")

    def is_empty(self) -> bool:
        """Return True if committing this change would not alter any state."""
        return (
            not any(d.delta for d in self.deltas)
            and not self.allowance_updates
            and not self.timestamp_updates
            and self.paused is None
        )

    def __repr__(self) -> str:
        return (
            f"PendingChange({self.operation.value}, {len(self.deltas)} deltas, "
            f"supply {self.supply_delta:+d})"
        )


# Result of a compute_* function: the change to commit, or why it was refused.
Outcome = Union[PendingChange, ErrorCode]


@dataclass(frozen=True, slots=True)
class OpResult:
    """
    Tagged result of a mutating operation.

    Exactly one of value/error is meaningful: a successful result carries
    the payload (True, or the new pause flag for set_paused) and error=None.
    """
    value: Any = None
    error: Optional[ErrorCode] = None

    @classmethod
    def success(cls, value: Any = True) -> OpResult:
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, code: ErrorCode) -> OpResult:
        return cls(value=None, error=ErrorCode(code))

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> Dict[str, Any]:
        """Return {'value': payload} on success or {'error': code} on failure."""
        if self.ok:
            return {"value": self.value}
        return {"error": int(self.error)}

    def __repr__(self) -> str:
        if self.ok:
            return f"OpResult(value={self.value!r})"
        return f"OpResult(error={int(self.error)} {self.error.name})"


@dataclass(frozen=True, slots=True)
class OperationRecord:
    """
    Executed, immutable record of an applied operation - represents FACT.

    Attributes:
        sequence_number: Monotonic position within the ledger's log
        operation: Which operation was applied
        arguments: Call arguments, caller first
        block_height: Block height at which it was applied
        value: Success payload that was returned
    """
    sequence_number: int
    operation: OperationType
    arguments: Tuple[Any, ...]
    block_height: int
    value: Any = True

    @property
    def caller(self) -> str:
        return self.arguments[0]

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.arguments)
        return f"#{self.sequence_number} @{self.block_height} {self.operation.value}({args})"


# ============================================================================
# INPUT GUARDS
# ============================================================================

def require_account(account: str, role: str = "account") -> str:
    """
    Validate an account identifier.

    Raises:
        ValueError: If account is not a non-empty string
    """
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"{role} must be a non-empty string, got {account!r}")
    return account


def require_amount(amount: int) -> int:
    """
    Validate that an amount is an integer.

    Sign is not checked here; non-positive amounts are a contract outcome
    (INVALID_AMOUNT), not a programming error.

    Raises:
        ValueError: If amount is not an int (bool is rejected)
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"amount must be int, got {type(amount).__name__}")
    return amount


# ============================================================================
# CANONICALIZATION
# ============================================================================

def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Independent of dict insertion order and nesting depth.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{value}"
    if isinstance(value, Enum):
        return f"E:{value.value}"
    if isinstance(value, AllowanceKey):
        return f"K:{_canonicalize(value.owner)}>{_canonicalize(value.spender)}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: _canonicalize(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    return f"R:{repr(value)}"


def compute_digest(state: Dict[str, Any]) -> str:
    """Deterministic 16-hex-char sha256 digest of a state snapshot."""
    return hashlib.sha256(_canonicalize(state).encode()).hexdigest()[:16]
