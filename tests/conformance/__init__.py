"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Supply equals liquid plus staked, within the cap
2. atomicity.py - Rejected operations change nothing
3. pause.py - The pause flag gates exactly the user operations
4. determinism.py - Identical inputs, identical state; replay reproduces state
5. temporal.py - Stake lock period and block clock behaviour

These tests use hypothesis for property-based testing.
"""
