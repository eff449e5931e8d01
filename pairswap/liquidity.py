"""Liquidity share accounting.

Computes how many shares a deposit mints and how much of each reserve a
burn returns. All amounts here are oriented to the canonical pair
(``amount0`` for token0, ``amount1`` for token1). Every division truncates,
so rounding losses fall on the depositor or withdrawer and never on the
holders who stay in the pool.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from pairswap.errors import (
    InsufficientAmount,
    InsufficientLiquidityBurned,
    InsufficientShares,
    NoLiquidity,
    ZeroLiquidityMinted,
)
from pairswap.math.integer import babylonian_sqrt
from pairswap.pools.pool import Pool
from pairswap.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class Deposit:
    """Accepted deposit amounts and the shares they mint."""

    amount0: int
    amount1: int
    shares: int


@dataclass(frozen=True)
class Withdrawal:
    """Shares burned and the reserve amounts they return."""

    shares: int
    amount0: int
    amount1: int


class LiquidityAccountant:
    """Share issuance and redemption math for constant-product pools."""

    def __init__(self, bounded: bool = True) -> None:
        self.bounded = bounded

    def _s(self, value: int) -> S:
        return S(value, bounded=self.bounded)

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B worth ``amount_a`` of A at the current reserve ratio.

        Raises:
            InsufficientAmount: If amount_a is zero
            NoLiquidity: If either reserve is zero
        """
        if amount_a <= 0:
            raise InsufficientAmount("Quoted amount must be positive")
        if reserve_a <= 0 or reserve_b <= 0:
            raise NoLiquidity("Pool has no reserves")
        return self._s(amount_a).mul_div(reserve_b, reserve_a).value

    def optimal_amounts(
        self,
        pool: Pool,
        desired0: int,
        desired1: int,
        min0: int,
        min1: int,
    ) -> tuple[int, int]:
        """Reconcile desired amounts to the pool's current ratio.

        An empty pool takes both desired amounts as-is. Otherwise the side
        whose desired amount binds is taken in full and the other side is
        the ratio-implied amount, which never exceeds what was offered.

        Raises:
            InsufficientAmount: If either accepted amount is below its minimum
        """
        if pool.is_empty:
            amounts = desired0, desired1
        else:
            optimal1 = self.quote(desired0, pool.reserve0, pool.reserve1)
            if optimal1 <= desired1:
                amounts = desired0, optimal1
            else:
                optimal0 = self.quote(desired1, pool.reserve1, pool.reserve0)
                assert optimal0 <= desired0  # Implied by optimal1 > desired1
                amounts = optimal0, desired1

        if amounts[0] < min0:
            raise InsufficientAmount(f"Accepted token0 amount {amounts[0]} below minimum {min0}")
        if amounts[1] < min1:
            raise InsufficientAmount(f"Accepted token1 amount {amounts[1]} below minimum {min1}")
        return amounts

    def shares_for(self, pool: Pool, amount0: int, amount1: int) -> int:
        """Shares minted for depositing exactly (amount0, amount1).

        The first deposit mints sqrt(amount0 * amount1); later deposits mint
        the smaller of the two pro-rata amounts.
        """
        if pool.is_empty:
            return babylonian_sqrt((self._s(amount0) * amount1).value)
        by0 = self._s(amount0).mul_div(pool.total_shares, pool.reserve0)
        by1 = self._s(amount1).mul_div(pool.total_shares, pool.reserve1)
        return by0.min(by1).value

    def compute_deposit(
        self,
        pool: Pool,
        desired0: int,
        desired1: int,
        min0: int = 0,
        min1: int = 0,
    ) -> Deposit:
        """Work out what a deposit accepts and mints, without mutating the pool.

        Raises:
            InsufficientAmount: If an accepted amount breaches its floor
            ZeroLiquidityMinted: If the deposit would mint nothing
        """
        amount0, amount1 = self.optimal_amounts(pool, desired0, desired1, min0, min1)
        shares = self.shares_for(pool, amount0, amount1)
        if shares == 0:
            raise ZeroLiquidityMinted(
                f"Deposit of ({amount0}, {amount1}) mints zero shares"
            )
        logger.debug("deposit_computed", amount0=amount0, amount1=amount1, shares=shares)
        return Deposit(amount0=amount0, amount1=amount1, shares=shares)

    def apply_deposit(self, pool: Pool, deposit: Deposit) -> None:
        pool.reserve0 = (self._s(pool.reserve0) + deposit.amount0).value
        pool.reserve1 = (self._s(pool.reserve1) + deposit.amount1).value
        pool.total_shares = (self._s(pool.total_shares) + deposit.shares).value

    def compute_withdrawal(
        self,
        pool: Pool,
        shares: int,
        balance: int,
        min0: int = 0,
        min1: int = 0,
    ) -> Withdrawal:
        """Work out what burning ``shares`` returns, without mutating the pool.

        Args:
            pool: Pool being withdrawn from
            shares: Share amount to burn
            balance: The caller's current share balance
            min0: Minimum acceptable token0 amount
            min1: Minimum acceptable token1 amount

        Raises:
            InsufficientShares: If balance < shares
            NoLiquidity: If the pool has no shares outstanding
            InsufficientLiquidityBurned: If either side rounds down to zero
            InsufficientAmount: If either side is below its minimum
        """
        if balance < shares:
            raise InsufficientShares(f"Balance {balance} < requested burn {shares}")
        if pool.is_empty:
            raise NoLiquidity("Pool has no shares outstanding")
        if shares > pool.total_shares:
            raise InsufficientShares(f"Burn {shares} exceeds total supply {pool.total_shares}")

        amount0 = self._s(shares).mul_div(pool.reserve0, pool.total_shares).value
        amount1 = self._s(shares).mul_div(pool.reserve1, pool.total_shares).value
        if amount0 == 0 or amount1 == 0:
            raise InsufficientLiquidityBurned(
                f"Burning {shares} shares returns ({amount0}, {amount1})"
            )
        if amount0 < min0:
            raise InsufficientAmount(f"Returned token0 amount {amount0} below minimum {min0}")
        if amount1 < min1:
            raise InsufficientAmount(f"Returned token1 amount {amount1} below minimum {min1}")
        logger.debug("withdrawal_computed", shares=shares, amount0=amount0, amount1=amount1)
        return Withdrawal(shares=shares, amount0=amount0, amount1=amount1)

    def apply_withdrawal(self, pool: Pool, withdrawal: Withdrawal) -> None:
        pool.reserve0 = (self._s(pool.reserve0) - withdrawal.amount0).value
        pool.reserve1 = (self._s(pool.reserve1) - withdrawal.amount1).value
        pool.total_shares = (self._s(pool.total_shares) - withdrawal.shares).value


# Singleton instance
liquidity_accountant = LiquidityAccountant()
