"""Constant-product swap engine.

Pools price swaps with the constant product formula x * y = k, excluding a
proportional fee from the input before the curve is applied:

    amount_in_with_fee = amount_in * fee_numerator
    amount_out = amount_in_with_fee * reserve_out
                 / (reserve_in * fee_denominator + amount_in_with_fee)

With the default 997/1000 parameters, 0.3% of every input stays in the pool
as yield for liquidity holders. All multiplications happen before the single
truncating division, and the output side is never rounded up.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from pairswap.amm.base import AMM, SwapResult
from pairswap.constants import FEE_DENOMINATOR, FEE_NUMERATOR
from pairswap.errors import (
    InsufficientAmount,
    InsufficientLiquidity,
    InsufficientOutput,
    InvalidPath,
    NoLiquidity,
)
from pairswap.pairs import PairKey, path_keys
from pairswap.pools.pool import Pool
from pairswap.safe_int import S, Underflow

logger = structlog.get_logger()


class ConstantProduct(AMM):
    """Fee-adjusted constant-product math over integer reserves.

    Args:
        fee_numerator: Multiplier applied to the input (997 for a 0.3% fee)
        fee_denominator: Scale of the fee fraction (1000)
        bounded: If True, intermediate values above 2**256-1 raise Uint256Overflow
    """

    def __init__(
        self,
        fee_numerator: int = FEE_NUMERATOR,
        fee_denominator: int = FEE_DENOMINATOR,
        bounded: bool = True,
    ) -> None:
        self.fee_numerator = fee_numerator
        self.fee_denominator = fee_denominator
        self.bounded = bounded

    def _s(self, value: int) -> S:
        return S(value, bounded=self.bounded)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount using the constant product formula.

        Raises:
            InsufficientAmount: If amount_in is zero
            NoLiquidity: If either reserve is zero
            InsufficientLiquidity: If the output would reach the output reserve
        """
        if amount_in <= 0:
            raise InsufficientAmount("Swap input must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise NoLiquidity("Pool has no reserves")

        amount_in_with_fee = self._s(amount_in) * self.fee_numerator
        numerator = amount_in_with_fee * reserve_out
        denominator = self._s(reserve_in) * self.fee_denominator + amount_in_with_fee
        amount_out = (numerator // denominator).value

        # Cannot happen with a fee fraction <= 1; checked for non-standard parameters
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Output {amount_out} would drain reserve {reserve_out}"
            )
        return amount_out

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate required input for a desired output.

        Formula: amount_in = (res_in * out * D) / ((res_out - out) * N) + 1

        Raises:
            InsufficientOutput: If amount_out is zero
            NoLiquidity: If either reserve is zero
            InsufficientLiquidity: If amount_out is not strictly below reserve_out
        """
        if amount_out <= 0:
            raise InsufficientOutput("Requested output must be positive")
        if reserve_in <= 0 or reserve_out <= 0:
            raise NoLiquidity("Pool has no reserves")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Requested output {amount_out} >= reserve {reserve_out}"
            )

        numerator = self._s(reserve_in) * amount_out * self.fee_denominator
        denominator = (self._s(reserve_out) - amount_out) * self.fee_numerator
        return (numerator // denominator + 1).value

    def apply_swap(self, pool: Pool, token0_in: bool, amount_in: int, amount_out: int) -> None:
        """Move a hop's amounts through a pool's reserves in place.

        The input reserve grows by amount_in and the output reserve shrinks by
        amount_out.

        Raises:
            InsufficientLiquidity: If amount_out would empty or overdraw the reserve
        """
        reserve_in, reserve_out = pool.get_reserves(token0_in)
        try:
            new_reserve_out = self._s(reserve_out) - amount_out
        except Underflow as err:
            raise InsufficientLiquidity(
                f"Output {amount_out} exceeds reserve {reserve_out}"
            ) from err
        if not new_reserve_out:
            raise InsufficientLiquidity(f"Output {amount_out} would drain reserve {reserve_out}")
        new_reserve_in = self._s(reserve_in) + amount_in
        pool.set_reserves(token0_in, new_reserve_in.value, new_reserve_out.value)

    def simulate_swap(self, pool: Pool, key: PairKey, token_in: str, amount_in: int) -> SwapResult:
        """Quote a single hop (exact input) without touching the pool."""
        token0_in = key.is_token0(token_in)
        reserve_in, reserve_out = pool.get_reserves(token0_in)
        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out)
        return SwapResult(
            pair=key,
            token_in=key.token0 if token0_in else key.token1,
            token_out=key.token1 if token0_in else key.token0,
            amount_in=amount_in,
            amount_out=amount_out,
        )

    def swap_exact_in(
        self, pools: Mapping[PairKey, Pool], path: list[str], amount_in: int
    ) -> list[SwapResult]:
        """Chain exact-input hops left to right, applying each to ``pools``.

        Each hop's output is the next hop's input and is quoted against the
        pool as left by the previous hops. ``pools`` must hold an entry for
        every hop; callers pass staged copies, or throwaway copies for quotes.

        Raises:
            NoLiquidity: If any pool along the path is empty (checked up front)
            InsufficientOutput: If any hop rounds down to zero output
        """
        keys = path_keys(path)
        _require_liquidity(pools, keys)

        hops: list[SwapResult] = []
        current = amount_in
        for i, key in enumerate(keys):
            pool = pools[key]
            hop = self.simulate_swap(pool, key, path[i], current)
            if hop.amount_out == 0:
                raise InsufficientOutput(f"Hop {i} through {key} yields zero output")
            self.apply_swap(pool, key.is_token0(path[i]), hop.amount_in, hop.amount_out)
            logger.debug(
                "swap_hop",
                hop=i,
                pair=str(key),
                amount_in=hop.amount_in,
                amount_out=hop.amount_out,
            )
            hops.append(hop)
            current = hop.amount_out
        return hops

    def swap_exact_out(
        self, pools: Mapping[PairKey, Pool], path: list[str], amount_out: int
    ) -> list[SwapResult]:
        """Chain exact-output hops, applying each to ``pools``.

        Required inputs are computed right to left against the current
        reserves, then the hops are applied left to right. Paths that pass
        through the same pool twice are rejected.

        Raises:
            InvalidPath: If the path goes through the same pool twice
            NoLiquidity: If any pool along the path is empty (checked up front)
            InsufficientLiquidity: If a requested output is >= its reserve
        """
        keys = path_keys(path)
        if len(set(keys)) != len(keys):
            raise InvalidPath(f"Exact-output path revisits a pool: {[str(k) for k in keys]}")
        _require_liquidity(pools, keys)

        amounts = [0] * len(path)
        amounts[-1] = amount_out
        for i in range(len(keys) - 1, -1, -1):
            key = keys[i]
            reserve_in, reserve_out = pools[key].get_reserves(key.is_token0(path[i]))
            amounts[i] = self.get_amount_in(amounts[i + 1], reserve_in, reserve_out)

        hops = []
        for i, key in enumerate(keys):
            token0_in = key.is_token0(path[i])
            self.apply_swap(pools[key], token0_in, amounts[i], amounts[i + 1])
            hops.append(
                SwapResult(
                    pair=key,
                    token_in=key.token0 if token0_in else key.token1,
                    token_out=key.token1 if token0_in else key.token0,
                    amount_in=amounts[i],
                    amount_out=amounts[i + 1],
                )
            )
        return hops


def _require_liquidity(pools: Mapping[PairKey, Pool], keys: list[PairKey]) -> None:
    for key in keys:
        pool = pools[key]
        if pool.reserve0 == 0 or pool.reserve1 == 0:
            raise NoLiquidity(f"Pool {key} has no liquidity")


def amounts_from_hops(hops: list[SwapResult]) -> list[int]:
    """Flatten hops into [amount_in, out_1, ..., out_n] (one entry per path asset)."""
    return [hops[0].amount_in] + [hop.amount_out for hop in hops]


# Singleton instance with the standard 0.3% fee
constant_product = ConstantProduct()
