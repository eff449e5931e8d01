"""Test helpers module for shared test utilities.

- constants: Asset/account addresses, clock values
- factories: Exchange factory, fixed clock, scripted ledger
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    DEADLINE,
    NOW,
    STARTING_BALANCE,
    USDC,
    USDT,
    WETH,
)
from tests.helpers.factories import (
    FixedClock,
    ScriptedAssetLedger,
    fund,
    make_exchange,
    seed_pool,
)

__all__ = [
    # Constants
    "DAI",
    "USDC",
    "WETH",
    "USDT",
    "ALICE",
    "BOB",
    "CAROL",
    "NOW",
    "DEADLINE",
    "STARTING_BALANCE",
    # Factories
    "FixedClock",
    "ScriptedAssetLedger",
    "fund",
    "make_exchange",
    "seed_pool",
]
