"""
operations.py - Pure validation and change construction for every mutating operation

Each compute_* function takes a read-only TokenView plus the call arguments and
returns either:
    - a PendingChange describing everything the operation would do, or
    - the ErrorCode of the first check that failed.

Checks run in a fixed order and the first failure wins:
    1. authorization          (set_paused, mint)
    2. pause flag             (everything except set_paused, mint)
    3. amount positivity      (everything except set_paused, transfer_from)
    4. sufficiency            (balance, allowance, stake, lock, supply cap)

Nothing here mutates state. TokenLedger commits the returned PendingChange.

Example:
    outcome = compute_transfer(ledger, "alice", "bob", 200)
    if isinstance(outcome, ErrorCode):
        ...  # refused, ledger untouched
    else:
        ...  # outcome.deltas == (Δ(alice.liquid -200), Δ(bob.liquid +200))
"""

from __future__ import annotations

from .core import (
    TokenView, PendingChange, BalanceDelta, AllowanceKey, Outcome,
    ErrorCode, OperationType, Book,
    require_account, require_amount,
)
from .staking import is_unlocked


def is_admin(view: TokenView, caller: str) -> bool:
    return caller == view.admin


def compute_set_paused(view: TokenView, caller: str, pause: bool) -> Outcome:
    """
    Toggle the global pause flag. Admin only; not itself gated by pause.

    Returns:
        PendingChange whose value is the new flag, or UNAUTHORIZED
    """
    require_account(caller, "caller")
    if not isinstance(pause, bool):
        raise ValueError(f"pause must be bool, got {type(pause).__name__}")

    if not is_admin(view, caller):
        return ErrorCode.UNAUTHORIZED
    return PendingChange(OperationType.SET_PAUSED, value=pause, paused=pause)


def compute_mint(view: TokenView, caller: str, recipient: str, amount: int) -> Outcome:
    """
    Issue new tokens to recipient. Admin only; minting ignores the pause flag.

    Returns:
        PendingChange crediting recipient and raising supply, or
        UNAUTHORIZED / INVALID_AMOUNT / SUPPLY_CAP_EXCEEDED
    """
    require_account(caller, "caller")
    require_account(recipient, "recipient")
    require_amount(amount)

    if not is_admin(view, caller):
        return ErrorCode.UNAUTHORIZED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT
    if view.total_supply + amount > view.max_supply:
        return ErrorCode.SUPPLY_CAP_EXCEEDED

    return PendingChange(
        OperationType.MINT,
        deltas=(BalanceDelta(recipient, Book.LIQUID, amount),),
        supply_delta=amount,
    )


def compute_burn(view: TokenView, caller: str, amount: int) -> Outcome:
    """Destroy tokens from the caller's liquid balance."""
    require_account(caller, "caller")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT
    if view.get_balance(caller) < amount:
        return ErrorCode.INSUFFICIENT_BALANCE

    return PendingChange(
        OperationType.BURN,
        deltas=(BalanceDelta(caller, Book.LIQUID, -amount),),
        supply_delta=-amount,
    )


def compute_transfer(view: TokenView, caller: str, recipient: str, amount: int) -> Outcome:
    """
    Move tokens from the caller's liquid balance to recipient.

    The debit is ordered before the credit, so caller == recipient nets to zero.
    """
    require_account(caller, "caller")
    require_account(recipient, "recipient")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT
    if view.get_balance(caller) < amount:
        return ErrorCode.INSUFFICIENT_BALANCE

    return PendingChange(
        OperationType.TRANSFER,
        deltas=(
            BalanceDelta(caller, Book.LIQUID, -amount),
            BalanceDelta(recipient, Book.LIQUID, amount),
        ),
    )


def compute_approve(view: TokenView, caller: str, spender: str, amount: int) -> Outcome:
    """
    Set the amount spender may move out of the caller's balance.

    Overwrites any previous allowance; the caller's balance is not checked.
    """
    require_account(caller, "caller")
    require_account(spender, "spender")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT

    return PendingChange(
        OperationType.APPROVE,
        allowance_updates=((AllowanceKey(caller, spender), amount),),
    )


def compute_transfer_from(
    view: TokenView,
    caller: str,
    owner: str,
    recipient: str,
    amount: int,
) -> Outcome:
    """
    Spend part of the allowance owner granted to caller, paying recipient.

    A zero amount passes every check and changes nothing. Negative amounts
    are refused with INVALID_AMOUNT.

    Returns:
        PendingChange debiting owner, crediting recipient and reducing the
        allowance by exactly amount, or
        CONTRACT_PAUSED / INVALID_AMOUNT / ALLOWANCE_EXCEEDED / INSUFFICIENT_BALANCE
    """
    require_account(caller, "caller")
    require_account(owner, "owner")
    require_account(recipient, "recipient")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount < 0:
        return ErrorCode.INVALID_AMOUNT

    allowance = view.get_allowance(owner, caller)
    if allowance < amount:
        return ErrorCode.ALLOWANCE_EXCEEDED
    if view.get_balance(owner) < amount:
        return ErrorCode.INSUFFICIENT_BALANCE

    if amount == 0:
        return PendingChange(OperationType.TRANSFER_FROM)

    return PendingChange(
        OperationType.TRANSFER_FROM,
        deltas=(
            BalanceDelta(owner, Book.LIQUID, -amount),
            BalanceDelta(recipient, Book.LIQUID, amount),
        ),
        allowance_updates=((AllowanceKey(owner, caller), allowance - amount),),
    )


def compute_stake(view: TokenView, caller: str, amount: int) -> Outcome:
    """
    Lock liquid tokens into the caller's stake.

    The staking timestamp is overwritten with the current block height, which
    relocks the whole staked position, not just the added amount.
    """
    require_account(caller, "caller")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT
    if view.get_balance(caller) < amount:
        return ErrorCode.INSUFFICIENT_BALANCE

    return PendingChange(
        OperationType.STAKE,
        deltas=(
            BalanceDelta(caller, Book.LIQUID, -amount),
            BalanceDelta(caller, Book.STAKED, amount),
        ),
        timestamp_updates=((caller, view.block_height),),
    )


def compute_unstake(view: TokenView, caller: str, amount: int) -> Outcome:
    """
    Release staked tokens back to the caller's liquid balance.

    The staking timestamp is left as is, so whatever stays staked keeps its
    unlock eligibility.
    """
    require_account(caller, "caller")
    require_amount(amount)

    if view.paused:
        return ErrorCode.CONTRACT_PAUSED
    if amount <= 0:
        return ErrorCode.INVALID_AMOUNT
    if view.get_staked_balance(caller) < amount:
        return ErrorCode.INSUFFICIENT_STAKE
    if not is_unlocked(view, caller):
        return ErrorCode.STAKE_LOCKED

    return PendingChange(
        OperationType.UNSTAKE,
        deltas=(
            BalanceDelta(caller, Book.STAKED, -amount),
            BalanceDelta(caller, Book.LIQUID, amount),
        ),
    )
