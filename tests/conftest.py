"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Ledgers at various stages (empty, funded, with allowances, with stakes)
- FakeViews for pure operation tests
- Comparison and conservation utilities
"""

import pytest
from typing import Tuple

from token_ledger import TokenLedger

from tests.fake_view import FakeView


ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
ALICE = "ST2CY5V39NHDP5P0TP2KS8AMGE0Z8DVJR4VPD9BF2"
BOB = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5N7R21XCP"
CAROL = "ST4V5P0WQX4K3M2MFTM2G2G3HKHSDGNV5N7R21XD"

START_HEIGHT = 100


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def make_ledger(**kwargs) -> TokenLedger:
    """Quiet ledger administered by ADMIN, starting at START_HEIGHT."""
    kwargs.setdefault("initial_block_height", START_HEIGHT)
    kwargs.setdefault("verbose", False)
    return TokenLedger(ADMIN, **kwargs)


def compare_ledger_states(ledger1: TokenLedger, ledger2: TokenLedger) -> dict:
    """Compare two ledger snapshots key by key and return the differences."""
    snap1 = ledger1.snapshot()
    snap2 = ledger2.snapshot()
    diffs = {
        key: {"ledger1": snap1.get(key), "ledger2": snap2.get(key)}
        for key in set(snap1) | set(snap2)
        if snap1.get(key) != snap2.get(key)
    }
    return {"equal": not diffs, "diffs": diffs}


def ledger_state_equals(ledger1: TokenLedger, ledger2: TokenLedger) -> bool:
    """Check if two ledgers hold equivalent state."""
    return compare_ledger_states(ledger1, ledger2)["equal"]


def verify_conservation(ledger: TokenLedger, expected_total: int = None) -> Tuple[bool, int]:
    """
    Verify total supply equals liquid plus staked balances.

    Returns:
        (is_conserved, actual_total)
    """
    result = ledger.verify_supply()
    actual = result["liquid"] + result["staked"]
    if expected_total is not None:
        return result["valid"] and actual == expected_total, actual
    return result["valid"], actual


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with nothing minted."""
    return make_ledger()


@pytest.fixture
def funded_ledger(empty_ledger):
    """Ledger with ALICE holding 1000 tokens."""
    empty_ledger.mint(ADMIN, ALICE, 1000)
    return empty_ledger


@pytest.fixture
def approved_ledger(funded_ledger):
    """Funded ledger where ALICE has approved CAROL for 300."""
    funded_ledger.approve(ALICE, CAROL, 300)
    return funded_ledger


@pytest.fixture
def staked_ledger(funded_ledger):
    """Funded ledger where ALICE staked 200 at START_HEIGHT."""
    funded_ledger.stake(ALICE, 200)
    return funded_ledger


@pytest.fixture
def small_cap_ledger():
    """Ledger with a max supply of 1000 for cap tests."""
    return make_ledger(max_supply=1000)


# =============================================================================
# VIEW FIXTURES
# =============================================================================

@pytest.fixture
def funded_view():
    """FakeView with ALICE holding 500 liquid and 200 staked since height 95."""
    return FakeView(
        admin=ADMIN,
        balances={ALICE: 500, BOB: 50},
        staked={ALICE: 200},
        timestamps={ALICE: 95},
        allowances={(ALICE, CAROL): 150},
        block_height=START_HEIGHT,
    )


@pytest.fixture
def paused_view(funded_view):
    """The funded view with the pause flag set."""
    return funded_view.with_changes(paused=True)
