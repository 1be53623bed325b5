#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Token Ledger Step by Step

A walkthrough of the creator token ledger. Each step builds on the
previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation   - The empty ledger, minting, the supply cap
  4-6:  Movement     - Transfers, allowances, delegated transfers
  7-8:  Staking      - Locking tokens and waiting out the lock period
  9-10: Control      - Pausing, history reconstruction and replay

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from token_ledger import (
    TokenLedger, ErrorCode,
    MAX_SUPPLY, LOCK_PERIOD,
    get_stake_position, blocks_until_unlock,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    admin: str = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
    alice: str = "ST2CY5V39NHDP5P0TP2KS8AMGE0Z8DVJR4VPD9BF2"
    bob: str = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5N7R21XCP"
    carol: str = "ST4V5P0WQX4K3M2MFTM2G2G3HKHSDGNV5N7R21XD"

    start_height: int = 100
    initial_mint: int = 1000
    transfer_amount: int = 200
    allowance: int = 300
    delegated_amount: int = 100
    stake_amount: int = 200
    unstake_amount: int = 100


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def short(account: str) -> str:
    return account[:6] + "…"


def show_balances(ledger: TokenLedger):
    print(f"{'Account':<12} {'Liquid':>10} {'Staked':>10}")
    print("-" * 34)
    for name in ("alice", "bob", "carol"):
        account = getattr(CONFIG, name)
        print(f"{name:<12} {ledger.get_balance(account):>10} {ledger.get_staked_balance(account):>10}")
    print("-" * 34)
    print(f"{'supply':<12} {ledger.total_supply:>21}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_empty_ledger():
    step_header(1, "The Empty Ledger",
        "See that a token ledger starts with an admin, a cap and a block clock.")

    print(f">>> ledger = TokenLedger(admin, initial_block_height={CONFIG.start_height})")
    ledger = TokenLedger(CONFIG.admin, initial_block_height=CONFIG.start_height, verbose=True)

    section_header("Initial State")
    print(f"Admin:          {short(ledger.admin)}")
    print(f"Total supply:   {ledger.total_supply}")
    print(f"Max supply:     {ledger.max_supply:,}  (MAX_SUPPLY = {MAX_SUPPLY:,})")
    print(f"Lock period:    {ledger.lock_period} blocks")
    print(f"Block height:   {ledger.block_height}")
    print(f"Paused:         {ledger.paused}")
    print(f"Digest:         {ledger.state_digest()}")
    return ledger


def step_02_mint(ledger: TokenLedger):
    step_header(2, "Minting",
        "Only the admin can create tokens, and only in positive amounts.")

    print(">>> ledger.mint(admin, alice, 1000)")
    result = ledger.mint(CONFIG.admin, CONFIG.alice, CONFIG.initial_mint)
    print(f"    {result}")

    section_header("Rejections")
    print(">>> ledger.mint(alice, alice, 1000)")
    print(f"    {ledger.mint(CONFIG.alice, CONFIG.alice, CONFIG.initial_mint)}")
    print(">>> ledger.mint(admin, alice, 0)")
    print(f"    {ledger.mint(CONFIG.admin, CONFIG.alice, 0)}")

    show_balances(ledger)
    return ledger


def step_03_supply_cap(ledger: TokenLedger):
    step_header(3, "The Supply Cap",
        "A mint that would push supply past the cap is refused and changes nothing.")

    room = ledger.max_supply - ledger.total_supply
    print(f"Room under the cap: {room:,}")
    print(f">>> ledger.mint(admin, bob, {room + 1:,})")
    result = ledger.mint(CONFIG.admin, CONFIG.bob, room + 1)
    print(f"    {result}")
    assert result.error == ErrorCode.SUPPLY_CAP_EXCEEDED
    print(f"Bob still holds {ledger.get_balance(CONFIG.bob)}; supply is {ledger.total_supply}")
    return ledger


# ============================================================================
# PHASE 2: MOVEMENT (Steps 4-6)
# ============================================================================

def step_04_transfer(ledger: TokenLedger):
    step_header(4, "Transfers",
        "Liquid tokens move between accounts without changing supply.")

    print(">>> ledger.transfer(alice, bob, 200)")
    ledger.transfer(CONFIG.alice, CONFIG.bob, CONFIG.transfer_amount)
    print(">>> ledger.transfer(bob, alice, 10_000)")
    ledger.transfer(CONFIG.bob, CONFIG.alice, 10_000)
    show_balances(ledger)
    return ledger


def step_05_approve(ledger: TokenLedger):
    step_header(5, "Allowances",
        "An owner lets a spender move up to a fixed amount on their behalf.")

    print(">>> ledger.approve(alice, carol, 300)")
    ledger.approve(CONFIG.alice, CONFIG.carol, CONFIG.allowance)
    print(f"Allowance alice -> carol: {ledger.get_allowance(CONFIG.alice, CONFIG.carol)}")
    print(f"Allowance carol -> alice: {ledger.get_allowance(CONFIG.carol, CONFIG.alice)}  (directional)")
    return ledger


def step_06_transfer_from(ledger: TokenLedger):
    step_header(6, "Delegated Transfers",
        "A spender moves the owner's tokens and the allowance shrinks by exactly that much.")

    print(">>> ledger.transfer_from(carol, alice, bob, 100)")
    ledger.transfer_from(CONFIG.carol, CONFIG.alice, CONFIG.bob, CONFIG.delegated_amount)
    print(f"Allowance alice -> carol: {ledger.get_allowance(CONFIG.alice, CONFIG.carol)}")

    section_header("Beyond the allowance")
    print(">>> ledger.transfer_from(carol, alice, bob, 500)")
    ledger.transfer_from(CONFIG.carol, CONFIG.alice, CONFIG.bob, 500)
    show_balances(ledger)
    return ledger


# ============================================================================
# PHASE 3: STAKING (Steps 7-8)
# ============================================================================

def step_07_stake(ledger: TokenLedger):
    step_header(7, "Staking",
        f"Staked tokens count toward supply but stay locked for {LOCK_PERIOD} blocks.")

    print(f">>> ledger.stake(alice, 200)   # at height {ledger.block_height}")
    ledger.stake(CONFIG.alice, CONFIG.stake_amount)
    print(f"Position: {get_stake_position(ledger, CONFIG.alice)}")

    ledger.advance_block_height(CONFIG.start_height + 5)
    print(f"\nHeight {ledger.block_height}, {blocks_until_unlock(ledger, CONFIG.alice)} blocks to go")
    print(">>> ledger.unstake(alice, 100)")
    ledger.unstake(CONFIG.alice, CONFIG.unstake_amount)
    show_balances(ledger)
    return ledger


def step_08_unstake(ledger: TokenLedger):
    step_header(8, "Unstaking",
        "Once the lock period has elapsed, stake returns to the liquid balance.")

    ledger.advance_block_height(CONFIG.start_height + LOCK_PERIOD)
    print(f"Height {ledger.block_height}")
    print(">>> ledger.unstake(alice, 100)")
    ledger.unstake(CONFIG.alice, CONFIG.unstake_amount)
    show_balances(ledger)

    section_header("Conservation")
    check = ledger.verify_supply()
    print(f"liquid {check['liquid']} + staked {check['staked']} = {check['total_supply']}  valid={check['valid']}")
    return ledger


# ============================================================================
# PHASE 4: CONTROL (Steps 9-10)
# ============================================================================

def step_09_pause(ledger: TokenLedger):
    step_header(9, "Pausing",
        "While paused, user operations fail with 104; the admin can still mint.")

    ledger.set_paused(CONFIG.admin, True)
    ledger.transfer(CONFIG.alice, CONFIG.bob, 1)
    ledger.unstake(CONFIG.alice, 1)
    ledger.mint(CONFIG.admin, CONFIG.carol, 50)
    ledger.set_paused(CONFIG.admin, False)
    show_balances(ledger)
    return ledger


def step_10_history(ledger: TokenLedger):
    step_header(10, "History and Replay",
        "The operation log rebuilds any past height and the present exactly.")

    section_header("Operation Log")
    for record in ledger.operation_log:
        print(f"  {record!r}")

    ledger.verbose = False
    past = ledger.state_at(CONFIG.start_height + 5)
    print(f"\nAt height {past.block_height}: alice liquid={past.get_balance(CONFIG.alice)}, "
          f"staked={past.get_staked_balance(CONFIG.alice)}")

    replayed = ledger.replay()
    print(f"Live digest:     {ledger.state_digest()}")
    print(f"Replayed digest: {replayed.state_digest()}")
    assert replayed.state_digest() == ledger.state_digest()
    return ledger


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       CREATOR TOKEN LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    ledger = step_01_empty_ledger()
    for step in (
        step_02_mint, step_03_supply_cap,
        step_04_transfer, step_05_approve, step_06_transfer_from,
        step_07_stake, step_08_unstake,
        step_09_pause, step_10_history,
    ):
        wait_for_enter()
        ledger = step(ledger)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Failures come back as numeric codes and never change state
      - Supply equals liquid plus staked balances, and never exceeds the cap
      - Allowances are directional and spent exactly
      - Stakes unlock a fixed number of blocks after the latest stake
      - The operation log reproduces any point in the ledger's history

    Next steps:
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
