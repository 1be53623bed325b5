"""
ledger.py - Stateful Token Ledger Engine

The TokenLedger class is the central state manager for the token ledger.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements TokenView protocol for safe read-only access by pure functions
    - Runs the compute_* validators and commits their PendingChange atomically
    - Maintains liquid balances, staked balances, staking timestamps and allowances
    - Tracks the externally supplied block height (advance only, never backwards)
    - Records every applied operation and supports clone, replay and state_at
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Set, Tuple

from .core import (
    # Types
    AllowanceKey, PendingChange, OpResult, OperationRecord, Outcome,
    Balances,
    # Enums
    ErrorCode, OperationType, Book,
    # Constants
    MAX_SUPPLY, LOCK_PERIOD, DEFAULT_BLOCK_HEIGHT,
    # Exceptions
    InvariantViolation, ReplayError,
    # Helpers
    require_account, compute_digest,
)
from .operations import (
    is_admin,
    compute_set_paused, compute_mint, compute_burn, compute_transfer,
    compute_approve, compute_transfer_from, compute_stake, compute_unstake,
)


class TokenLedger:
    """
    Capped-supply token ledger with allowances and time-locked staking.

    Implements the TokenView protocol, so the ledger itself is passed to the
    pure compute_* functions that decide what each operation does.

    Design Principles:
        - Failures are values: every contract failure comes back as an
          OpResult carrying an ErrorCode, and leaves state untouched.
        - All or nothing: a PendingChange is staged and checked in full
          before any map is written.
        - Always logs: every applied operation is recorded, enabling
          replay() and state_at().

    Thread Safety:
        Not thread-safe. The execution environment must serialize calls.

    Example:
        ledger = TokenLedger("admin", initial_block_height=100)
        ledger.mint("admin", "alice", 1000)
        ledger.stake("alice", 200)
        ledger.unstake("alice", 100)        # OpResult(error=109 STAKE_LOCKED)
        ledger.advance_blocks(10)
        ledger.unstake("alice", 100)        # OpResult(value=True)
    """

    def __init__(
        self,
        admin: str,
        max_supply: int = MAX_SUPPLY,
        lock_period: int = LOCK_PERIOD,
        initial_block_height: int = DEFAULT_BLOCK_HEIGHT,
        verbose: bool = True,
    ):
        """
        Create a ledger with empty state.

        Args:
            admin: Account allowed to mint and toggle the pause flag
            max_supply: Cap on total supply (default: MAX_SUPPLY)
            lock_period: Blocks a stake stays locked (default: LOCK_PERIOD)
            initial_block_height: Starting block height (default: 0)
            verbose: Print a line per applied or rejected operation (default: True)

        Raises:
            ValueError: If admin is empty or any numeric setting is negative
        """
        require_account(admin, "admin")
        for label, setting in (
            ("max_supply", max_supply),
            ("lock_period", lock_period),
            ("initial_block_height", initial_block_height),
        ):
            if isinstance(setting, bool) or not isinstance(setting, int) or setting < 0:
                raise ValueError(f"{label} must be a non-negative int, got {setting!r}")

        self._admin = admin
        self._max_supply = max_supply
        self._lock_period = lock_period
        self._paused = False
        self._total_supply = 0
        self._balances: Balances = {}
        self._staked_balances: Balances = {}
        self._staking_timestamps: Dict[str, int] = {}
        self._allowances: Dict[AllowanceKey, int] = {}
        self._initial_block_height = initial_block_height
        self._block_height = initial_block_height
        self.operation_log: List[OperationRecord] = []
        self._next_sequence: int = 0
        self.verbose = verbose

    # ========================================================================
    # TokenView PROTOCOL IMPLEMENTATION (read-only)
    # ========================================================================

    @property
    def admin(self) -> str:
        return self._admin

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def max_supply(self) -> int:
        return self._max_supply

    @property
    def lock_period(self) -> int:
        return self._lock_period

    @property
    def block_height(self) -> int:
        """Current block height as last supplied by the environment."""
        return self._block_height

    @property
    def initial_block_height(self) -> int:
        return self._initial_block_height

    def get_balance(self, account: str) -> int:
        """Liquid balance of an account (0 if unknown)."""
        return self._balances.get(account, 0)

    def get_staked_balance(self, account: str) -> int:
        """Staked balance of an account (0 if unknown)."""
        return self._staked_balances.get(account, 0)

    def get_allowance(self, owner: str, spender: str) -> int:
        """Remaining amount spender may move out of owner's balance (0 if unset)."""
        return self._allowances.get(AllowanceKey(owner, spender), 0)

    def get_staking_timestamp(self, account: str) -> int:
        """Block height of the account's most recent stake (0 if never staked)."""
        return self._staking_timestamps.get(account, 0)

    # ========================================================================
    # OTHER QUERIES
    # ========================================================================

    def is_admin(self, account: str) -> bool:
        return is_admin(self, account)

    def holders(self) -> Balances:
        """All non-zero liquid balances, as a copy."""
        return dict(self._balances)

    def stakers(self) -> Balances:
        """All non-zero staked balances, as a copy."""
        return dict(self._staked_balances)

    def list_accounts(self) -> Set[str]:
        """Every account with a balance, a stake, a staking timestamp or an allowance."""
        accounts = set(self._balances) | set(self._staked_balances) | set(self._staking_timestamps)
        for key in self._allowances:
            accounts.add(key.owner)
            accounts.add(key.spender)
        return accounts

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify the supply invariants.

        Checks:
        - total_supply == sum(liquid balances) + sum(staked balances)
        - 0 <= total_supply <= max_supply
        - no negative balance in either book

        Accounts are summed in sorted order so the result is deterministic.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every check passes
            - 'total_supply', 'liquid', 'staked', 'max_supply': int
            - 'discrepancies': List[Dict] - one entry per failed check

        Example:
            result = ledger.verify_supply()
            assert result['valid'], result['discrepancies']
        """
        liquid = sum(self._balances[a] for a in sorted(self._balances))
        staked = sum(self._staked_balances[a] for a in sorted(self._staked_balances))
        discrepancies = []

        if liquid + staked != self._total_supply:
            discrepancies.append({
                'check': 'conservation',
                'expected': self._total_supply,
                'actual': liquid + staked,
                'difference': liquid + staked - self._total_supply,
            })
        if not 0 <= self._total_supply <= self._max_supply:
            discrepancies.append({
                'check': 'supply_cap',
                'expected': self._max_supply,
                'actual': self._total_supply,
            })
        for book, entries in ((Book.LIQUID, self._balances), (Book.STAKED, self._staked_balances)):
            for account in sorted(entries):
                if entries[account] < 0:
                    discrepancies.append({
                        'check': 'non_negative',
                        'book': book.value,
                        'account': account,
                        'actual': entries[account],
                    })

        return {
            'valid': len(discrepancies) == 0,
            'total_supply': self._total_supply,
            'liquid': liquid,
            'staked': staked,
            'max_supply': self._max_supply,
            'discrepancies': discrepancies,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict copy of the full ledger state (no log)."""
        return {
            'admin': self._admin,
            'paused': self._paused,
            'total_supply': self._total_supply,
            'max_supply': self._max_supply,
            'lock_period': self._lock_period,
            'block_height': self._block_height,
            'balances': dict(self._balances),
            'staked_balances': dict(self._staked_balances),
            'staking_timestamps': dict(self._staking_timestamps),
            'allowances': dict(self._allowances),
        }

    def state_digest(self) -> str:
        """Deterministic content hash of the ledger state."""
        return compute_digest(self.snapshot())

    # ========================================================================
    # BLOCK CLOCK
    # ========================================================================

    def advance_block_height(self, new_height: int) -> None:
        """
        Move the block clock to new_height.

        Height can only move forward, never backward.

        Raises:
            ValueError: If new_height is below the current height
        """
        if isinstance(new_height, bool) or not isinstance(new_height, int):
            raise ValueError(f"block height must be int, got {type(new_height).__name__}")
        if new_height < self._block_height:
            raise ValueError(
                f"Cannot move block height backwards: {new_height} < {self._block_height}"
            )
        self._block_height = new_height

    def advance_blocks(self, count: int = 1) -> int:
        """
        Move the block clock forward by count blocks.

        Returns:
            The new block height

        Raises:
            ValueError: If count is negative
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"count must be a non-negative int, got {count!r}")
        self.advance_block_height(self._block_height + count)
        return self._block_height

    # ========================================================================
    # OPERATIONS (Mutating)
    # ========================================================================

    def set_paused(self, caller: str, pause: bool) -> OpResult:
        """Admin only. Returns the new pause flag on success."""
        return self._run(
            OperationType.SET_PAUSED, (caller, pause),
            compute_set_paused(self, caller, pause),
        )

    def mint(self, caller: str, recipient: str, amount: int) -> OpResult:
        """Admin only. Not gated by pause."""
        return self._run(
            OperationType.MINT, (caller, recipient, amount),
            compute_mint(self, caller, recipient, amount),
        )

    def burn(self, caller: str, amount: int) -> OpResult:
        return self._run(
            OperationType.BURN, (caller, amount),
            compute_burn(self, caller, amount),
        )

    def transfer(self, caller: str, recipient: str, amount: int) -> OpResult:
        return self._run(
            OperationType.TRANSFER, (caller, recipient, amount),
            compute_transfer(self, caller, recipient, amount),
        )

    def approve(self, caller: str, spender: str, amount: int) -> OpResult:
        """Overwrite the allowance caller grants to spender."""
        return self._run(
            OperationType.APPROVE, (caller, spender, amount),
            compute_approve(self, caller, spender, amount),
        )

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> OpResult:
        """Spend from owner's balance using the allowance owner granted to caller."""
        return self._run(
            OperationType.TRANSFER_FROM, (caller, owner, recipient, amount),
            compute_transfer_from(self, caller, owner, recipient, amount),
        )

    def stake(self, caller: str, amount: int) -> OpResult:
        """Move liquid tokens into stake; relocks the caller's whole position."""
        return self._run(
            OperationType.STAKE, (caller, amount),
            compute_stake(self, caller, amount),
        )

    def unstake(self, caller: str, amount: int) -> OpResult:
        """Move staked tokens back to liquid once the lock period has elapsed."""
        return self._run(
            OperationType.UNSTAKE, (caller, amount),
            compute_unstake(self, caller, amount),
        )

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def _run(self, operation: OperationType, arguments: Tuple[Any, ...], outcome: Outcome) -> OpResult:
        """
        Commit a computed outcome and log it, or report the refusal.

        Args:
            operation: Operation being executed
            arguments: Call arguments, caller first
            outcome: PendingChange to commit, or the ErrorCode that refused it

        Returns:
            OpResult.success(change.value) or OpResult.failure(code)
        """
        if isinstance(outcome, ErrorCode):
            if self.verbose:
                args = ", ".join(repr(a) for a in arguments)
                print(f"✗ REJECTED: {operation.value}({args}) -> {int(outcome)} {outcome.name}")
            return OpResult.failure(outcome)

        self._commit(outcome)

        record = OperationRecord(
            sequence_number=self._next_sequence,
            operation=operation,
            arguments=arguments,
            block_height=self._block_height,
            value=outcome.value,
        )
        self._next_sequence += 1
        self.operation_log.append(record)

        if self.verbose:
            print(f"✓ APPLIED: {record!r}")
        return OpResult.success(outcome.value)

    def _book(self, book: Book) -> Balances:
        return self._balances if book is Book.LIQUID else self._staked_balances

    def _commit(self, change: PendingChange) -> None:
        """
        Apply a PendingChange atomically.

        Deltas are staged in order against current balances; nothing is
        written until every staged balance and the new supply pass their
        checks.

        Raises:
            InvariantViolation: If a balance would go negative or supply
                would leave [0, max_supply]. State is untouched when raised.
        """
        staged: Dict[Tuple[Book, str], int] = {}
        for d in change.deltas:
            key = (d.book, d.account)
            current = staged[key] if key in staged else self._book(d.book).get(d.account, 0)
            staged[key] = current + d.delta
            if staged[key] < 0:
                raise InvariantViolation(
                    f"{change.operation.value}: {d.account} {d.book.value} balance would be {staged[key]}"
                )

        new_supply = self._total_supply + change.supply_delta
        if not 0 <= new_supply <= self._max_supply:
            raise InvariantViolation(
                f"{change.operation.value}: supply would be {new_supply} (max {self._max_supply})"
            )

        for (book, account), amount in staged.items():
            entries = self._book(book)
            if amount:
                entries[account] = amount
            else:
                # Zero entries are equivalent to absent ones
                entries.pop(account, None)

        for key, amount in change.allowance_updates:
            if amount:
                self._allowances[key] = amount
            else:
                self._allowances.pop(key, None)

        for account, height in change.timestamp_updates:
            self._staking_timestamps[account] = height

        self._total_supply = new_supply
        if change.paused is not None:
            self._paused = change.paused

    # ========================================================================
    # TEMPORAL OPERATIONS
    # ========================================================================

    def clone(self) -> TokenLedger:
        """
        Create an independent copy of this ledger.

        Cloned state includes configuration, all maps, the pause flag,
        the block clock and the operation log.
        """
        cloned = TokenLedger.__new__(TokenLedger)
        cloned._admin = self._admin
        cloned._max_supply = self._max_supply
        cloned._lock_period = self._lock_period
        cloned._paused = self._paused
        cloned._total_supply = self._total_supply
        cloned._balances = dict(self._balances)
        cloned._staked_balances = dict(self._staked_balances)
        cloned._staking_timestamps = dict(self._staking_timestamps)
        cloned._allowances = dict(self._allowances)
        cloned._initial_block_height = self._initial_block_height
        cloned._block_height = self._block_height
        # Records are frozen, so a shallow list copy is enough
        cloned.operation_log = list(self.operation_log)
        cloned._next_sequence = self._next_sequence
        cloned.verbose = self.verbose
        return cloned

    def replay(self, upto_height: Optional[int] = None) -> TokenLedger:
        """
        Rebuild a ledger by re-executing the operation log.

        A fresh ledger with the same admin, configuration and initial block
        height re-runs each logged operation at the block height it was
        originally applied at, then advances to upto_height (or to this
        ledger's current height).

        Args:
            upto_height: Only replay operations applied at or below this height

        Returns:
            New TokenLedger with the replayed state and log

        Raises:
            ReplayError: If a logged operation is rejected during replay
        """
        target = self._block_height if upto_height is None else upto_height
        replayed = TokenLedger(
            self._admin,
            max_supply=self._max_supply,
            lock_period=self._lock_period,
            initial_block_height=self._initial_block_height,
            verbose=self.verbose,
        )

        for record in self.operation_log:
            if record.block_height > target:
                break
            replayed.advance_block_height(record.block_height)
            result = getattr(replayed, record.operation.value)(*record.arguments)
            if not result.ok:
                raise ReplayError(
                    f"Replay failed at {record!r}: {int(result.error)} {result.error.name}"
                )

        replayed.advance_block_height(max(target, replayed.block_height))
        return replayed

    def state_at(self, block_height: int) -> TokenLedger:
        """
        Reconstruct the ledger as it stood at a past block height.

        Includes every operation applied at or below block_height.

        Raises:
            ValueError: If block_height is in the future or before the
                        ledger's initial height
        """
        if block_height > self._block_height:
            raise ValueError(f"Block height {block_height} is in the future (current {self._block_height})")
        if block_height < self._initial_block_height:
            raise ValueError(
                f"Block height {block_height} predates the ledger (initial {self._initial_block_height})"
            )
        return self.replay(upto_height=block_height)

    def __repr__(self) -> str:
        return (
            f"TokenLedger(admin={self._admin!r}, supply={self._total_supply}/{self._max_supply}, "
            f"accounts={len(self.list_accounts())}, height={self._block_height}, paused={self._paused})"
        )
