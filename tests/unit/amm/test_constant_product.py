"""Tests for the constant-product swap engine."""

import math
from fractions import Fraction

import pytest

from pairswap.amm import ConstantProduct, amounts_from_hops, constant_product
from pairswap.errors import (
    IdenticalAssets,
    InsufficientAmount,
    InsufficientLiquidity,
    InsufficientOutput,
    InvalidPath,
    NoLiquidity,
)
from pairswap.pairs import sort_assets
from pairswap.pools import Pool
from pairswap.safe_int import Uint256Overflow
from tests.helpers import DAI, USDC, USDT, WETH


def reference_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Exact rational evaluation of the 0.3% fee formula, floored."""
    with_fee = Fraction(amount_in) * Fraction(997, 1000)
    return math.floor(with_fee * reserve_out / (reserve_in + with_fee))


class TestConstantProductMath:
    """Tests for get_amount_out / get_amount_in."""

    def test_reference_scenario(self):
        """Reserves (1_000000, 4_000000), 100_000 in: the formula yields 362_644."""
        amount_out = constant_product.get_amount_out(100_000, 1_000000, 4_000000)
        assert amount_out == 362_644
        assert amount_out == reference_amount_out(100_000, 1_000000, 4_000000)

    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out",
        [
            (1, 1_000, 1_000),
            (997, 10**6, 10**6),
            (10**18, 100 * 10**18, 250_000 * 10**6),
            (123_456_789, 987_654_321, 555_555_555_555),
            (10**30, 10**20, 10**20),
        ],
    )
    def test_matches_rational_reference(self, amount_in, reserve_in, reserve_out):
        """Integer formula equals the floored exact rational result."""
        assert constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out
        ) == reference_amount_out(amount_in, reserve_in, reserve_out)

    def test_output_strictly_below_reserve(self):
        """Even an enormous input cannot drain the output reserve."""
        assert constant_product.get_amount_out(10**40, 1, 1_000) < 1_000

    def test_zero_input_rejected(self):
        with pytest.raises(InsufficientAmount):
            constant_product.get_amount_out(0, 100, 100)

    def test_empty_reserves_rejected(self):
        with pytest.raises(NoLiquidity):
            constant_product.get_amount_out(100, 0, 100)
        with pytest.raises(NoLiquidity):
            constant_product.get_amount_out(100, 100, 0)

    def test_get_amount_in_inverts_get_amount_out(self):
        """get_amount_in rounds up, so its input buys at least the requested output."""
        amount_in = constant_product.get_amount_in(362_644, 1_000000, 4_000000)
        assert amount_in == 100_000
        assert constant_product.get_amount_out(amount_in, 1_000000, 4_000000) >= 362_644
        assert constant_product.get_amount_out(amount_in - 1, 1_000000, 4_000000) < 362_644

    def test_get_amount_in_rejects_full_reserve(self):
        with pytest.raises(InsufficientLiquidity):
            constant_product.get_amount_in(4_000000, 1_000000, 4_000000)

    def test_get_amount_in_rejects_zero_output(self):
        with pytest.raises(InsufficientOutput):
            constant_product.get_amount_in(0, 1_000000, 4_000000)

    def test_custom_fee(self):
        """A fee-free curve returns more than the 0.3% curve."""
        fee_free = ConstantProduct(fee_numerator=1000, fee_denominator=1000)
        assert fee_free.get_amount_out(100_000, 1_000000, 4_000000) == 363_636
        assert fee_free.get_amount_out(100_000, 1_000000, 4_000000) > 362_644

    def test_overflow_is_fatal(self):
        """Intermediate products above uint256 raise instead of wrapping."""
        with pytest.raises(Uint256Overflow):
            constant_product.get_amount_out(2**200, 2**10, 2**100)

    def test_unbounded_allows_wide_intermediates(self):
        wide = ConstantProduct(bounded=False)
        assert wide.get_amount_out(2**200, 2**10, 2**100) < 2**100


class TestApplySwap:
    """Tests for applying a hop's amounts to a pool."""

    def test_reserves_move_in_opposite_directions(self):
        pool = Pool(reserve0=1_000000, reserve1=4_000000, total_shares=2_000000)
        constant_product.apply_swap(pool, True, 100_000, 362_644)
        assert (pool.reserve0, pool.reserve1) == (1_100000, 3_637356)
        assert pool.total_shares == 2_000000

    def test_token1_in(self):
        pool = Pool(reserve0=1_000000, reserve1=4_000000, total_shares=2_000000)
        constant_product.apply_swap(pool, False, 400_000, 90_000)
        assert (pool.reserve0, pool.reserve1) == (910_000, 4_400000)

    def test_overdraw_rejected(self):
        """An output above the reserve is InsufficientLiquidity, not a negative reserve."""
        pool = Pool(reserve0=100, reserve1=100, total_shares=100)
        with pytest.raises(InsufficientLiquidity):
            constant_product.apply_swap(pool, True, 10, 101)
        assert (pool.reserve0, pool.reserve1) == (100, 100)

    def test_drain_rejected(self):
        pool = Pool(reserve0=100, reserve1=100, total_shares=100)
        with pytest.raises(InsufficientLiquidity):
            constant_product.apply_swap(pool, True, 10, 100)


class TestConstantProductInvariant:
    """The fee keeps reserve_in * reserve_out from ever shrinking."""

    @pytest.mark.parametrize("amount_in", [1_000, 7_777, 100_000, 999_999, 10**9])
    @pytest.mark.parametrize("token0_in", [True, False])
    def test_k_grows(self, amount_in, token0_in):
        pool = Pool(reserve0=1_000000, reserve1=4_000000, total_shares=2_000000)
        k_before = pool.reserve0 * pool.reserve1
        key = sort_assets(DAI, USDC)
        token_in = DAI if token0_in else USDC
        hops = constant_product.swap_exact_in({key: pool}, [token_in, key.token1 if token0_in else key.token0], amount_in)
        assert hops[0].amount_out > 0
        assert pool.reserve0 * pool.reserve1 > k_before


def _pools():
    return {
        sort_assets(DAI, USDC): Pool(reserve0=5_000000, reserve1=5_000000, total_shares=5_000000),
        sort_assets(USDC, WETH): Pool(reserve0=20_000000, reserve1=10_000, total_shares=447_213),
    }


class TestMultiHop:
    """Tests for chained swaps."""

    def test_two_hops_compose_single_quotes(self):
        """A DAI->USDC->WETH swap equals quoting each hop in turn."""
        pools = _pools()
        first = constant_product.get_amount_out(250_000, 5_000000, 5_000000)
        second = constant_product.get_amount_out(first, 20_000000, 10_000)

        hops = constant_product.swap_exact_in(pools, [DAI, USDC, WETH], 250_000)

        assert amounts_from_hops(hops) == [250_000, first, second]
        assert hops[0].token_in == DAI and hops[0].token_out == USDC
        assert hops[1].token_in == USDC and hops[1].token_out == WETH

    def test_hops_applied_to_pools(self):
        pools = _pools()
        hops = constant_product.swap_exact_in(pools, [DAI, USDC, WETH], 250_000)
        dai_usdc = pools[sort_assets(DAI, USDC)]
        usdc_weth = pools[sort_assets(USDC, WETH)]
        assert dai_usdc.reserve0 == 5_250000
        assert dai_usdc.reserve1 == 5_000000 - hops[0].amount_out
        assert usdc_weth.reserve0 == 20_000000 + hops[0].amount_out
        assert usdc_weth.reserve1 == 10_000 - hops[1].amount_out

    def test_empty_pool_checked_up_front(self):
        """An empty second hop fails before the first hop touches its pool."""
        pools = _pools()
        pools[sort_assets(WETH, USDT)] = Pool()
        with pytest.raises(NoLiquidity):
            constant_product.swap_exact_in(pools, [DAI, USDC, WETH, USDT], 250_000)
        assert pools[sort_assets(DAI, USDC)].reserve0 == 5_000000

    def test_zero_output_hop_rejected(self):
        pools = _pools()
        with pytest.raises(InsufficientOutput):
            constant_product.swap_exact_in(pools, [USDC, WETH], 1)

    def test_revisited_pool_sees_updated_reserves(self):
        """DAI->USDC->DAI quotes the second hop against the post-first-hop pool."""
        pools = _pools()
        hops = constant_product.swap_exact_in(pools, [DAI, USDC, DAI], 1_000000)
        back = constant_product.get_amount_out(hops[0].amount_out, 5_000000 - hops[0].amount_out, 6_000000)
        assert hops[1].amount_out == back
        assert hops[1].amount_out < 1_000000

    def test_short_path_rejected(self):
        with pytest.raises(InvalidPath):
            constant_product.swap_exact_in(_pools(), [DAI], 1)

    def test_identical_hop_rejected(self):
        with pytest.raises(IdenticalAssets):
            constant_product.swap_exact_in(_pools(), [DAI, DAI], 1)


class TestExactOutput:
    """Tests for exact-output chaining."""

    def test_single_hop(self):
        pool = Pool(reserve0=1_000000, reserve1=4_000000, total_shares=2_000000)
        key = sort_assets(DAI, USDC)
        hops = constant_product.swap_exact_out({key: pool}, [DAI, USDC], 362_644)
        assert amounts_from_hops(hops) == [100_000, 362_644]
        assert (pool.reserve0, pool.reserve1) == (1_100000, 3_637356)

    def test_two_hops_deliver_at_least_requested(self):
        pools = _pools()
        hops = constant_product.swap_exact_out(pools, [DAI, USDC, WETH], 100)
        amounts = amounts_from_hops(hops)
        assert amounts[-1] == 100
        fresh = _pools()
        forward = constant_product.swap_exact_in(fresh, [DAI, USDC, WETH], amounts[0])
        assert forward[-1].amount_out >= 100

    def test_output_at_reserve_rejected(self):
        pools = _pools()
        with pytest.raises(InsufficientLiquidity):
            constant_product.swap_exact_out(pools, [USDC, WETH], 10_000)

    def test_revisiting_path_rejected(self):
        """An exact output cannot be guaranteed through the same pool twice."""
        pools = _pools()
        with pytest.raises(InvalidPath):
            constant_product.swap_exact_out(pools, [DAI, USDC, DAI], 50_000)
        assert pools == _pools()
