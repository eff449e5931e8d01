"""Transaction guard: checks applied before any state-mutating operation.

The guard owns deadline and identity validation only. Slippage floors are
enforced by the liquidity and swap math that computes the amounts.
"""

from __future__ import annotations

import math

import structlog

from pairswap.errors import Expired, InvalidAmount
from pairswap.ledgers import Clock, SystemClock
from pairswap.math.integer import is_uint256
from pairswap.pairs import PairKey, path_keys, sort_assets

logger = structlog.get_logger()


class TransactionGuard:
    """Pre-flight checks for public operations.

    Args:
        clock: Time source for deadline checks (default: SystemClock)
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()

    def check_deadline(self, deadline: float) -> None:
        """Raise Expired if the deadline is strictly before now.

        Raises:
            InvalidAmount: If the deadline is not a real number (NaN included)
            Expired: If the deadline has passed
        """
        if (
            isinstance(deadline, bool)
            or not isinstance(deadline, (int, float))
            or math.isnan(deadline)
        ):
            raise InvalidAmount(f"deadline must be a real number, got {deadline!r}")
        now = self.clock.now()
        if deadline < now:
            logger.warning("deadline_expired", deadline=deadline, now=now)
            raise Expired(f"Deadline {deadline} is before current time {now}")

    def check_pair(self, asset_a: str, asset_b: str) -> PairKey:
        """Validate a pair and return its canonical key."""
        return sort_assets(asset_a, asset_b)

    def check_path(self, path: list[str]) -> list[PairKey]:
        """Validate every hop of a swap path and return their keys."""
        return path_keys(path)

    def check_amount(self, name: str, value: int) -> int:
        """Raise InvalidAmount unless value is a uint256 int."""
        if not is_uint256(value):
            raise InvalidAmount(f"{name} must be a uint256 integer, got {value!r}")
        return value

    def check(self, deadline: float, asset_a: str, asset_b: str, **amounts: int) -> PairKey:
        """Run deadline, pair and amount checks for a two-asset operation."""
        self.check_deadline(deadline)
        key = self.check_pair(asset_a, asset_b)
        for name, value in amounts.items():
            self.check_amount(name, value)
        return key
