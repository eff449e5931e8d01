"""Pool record for one canonical asset pair."""

from __future__ import annotations

from dataclasses import dataclass, replace

from pairswap.errors import PoolInvariantError


@dataclass
class Pool:
    """Reserve state for one canonical pair.

    ``reserve0`` is the reserve of the smaller asset of the pair key,
    ``reserve1`` the reserve of the larger one. A pool with no liquidity has
    no shares and vice versa; both reserves are zero together or positive
    together.
    """

    reserve0: int = 0
    reserve1: int = 0
    total_shares: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def copy(self) -> Pool:
        return replace(self)

    def get_reserves(self, token0_in: bool) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if token0_in:
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0

    def set_reserves(self, token0_in: bool, reserve_in: int, reserve_out: int) -> None:
        """Inverse of get_reserves."""
        if token0_in:
            self.reserve0, self.reserve1 = reserve_in, reserve_out
        else:
            self.reserve0, self.reserve1 = reserve_out, reserve_in

    def check_invariant(self) -> None:
        """Raise PoolInvariantError if the zero/non-zero invariant is broken."""
        if min(self.reserve0, self.reserve1, self.total_shares) < 0:
            raise PoolInvariantError(f"Negative pool field: {self}")
        drained = self.reserve0 == 0 and self.reserve1 == 0
        funded = self.reserve0 > 0 and self.reserve1 > 0
        if self.total_shares == 0 and not drained:
            raise PoolInvariantError(f"Reserves without shares: {self}")
        if self.total_shares > 0 and not funded:
            raise PoolInvariantError(f"Shares without two-sided reserves: {self}")
