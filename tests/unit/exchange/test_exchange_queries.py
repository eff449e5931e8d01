"""Tests for the read-only exchange operations."""

import pytest

from pairswap.amm import constant_product
from pairswap.config import ExchangeConfig
from pairswap.errors import InsufficientAmount, InvalidAmount, NoLiquidity
from pairswap.math import babylonian_sqrt
from pairswap.pairs import PairKey
from pairswap.pools import Pool
from tests.helpers import ALICE, DAI, USDC, USDT, WETH, make_exchange, seed_pool


@pytest.fixture(autouse=True)
def seeded(exchange):
    seed_pool(exchange, DAI, USDC, 1_000000, 4_000000)
    seed_pool(exchange, USDC, WETH, 4_000000, 2_000000)


class TestPrice:
    def test_both_directions(self, exchange):
        assert exchange.price(DAI, USDC) == 4 * 10**18
        assert exchange.price(USDC, DAI) == 25 * 10**16

    def test_truncates(self, exchange):
        seed_pool(exchange, DAI, WETH, 3, 1)
        assert exchange.price(DAI, WETH) == 10**18 // 3

    def test_custom_scale(self):
        exchange, _ledger, _events = make_exchange(ExchangeConfig(price_scale=10**6))
        seed_pool(exchange, DAI, USDC, 1_000000, 4_000000)
        assert exchange.price(DAI, USDC) == 4_000000

    def test_empty_pool(self, exchange):
        with pytest.raises(NoLiquidity):
            exchange.price(DAI, USDT)


class TestQuotes:
    def test_quote(self, exchange):
        assert exchange.quote(100_000, DAI, USDC) == 362_644

    def test_quote_does_not_mutate(self, exchange):
        exchange.quote(100_000, DAI, USDC)
        assert exchange.get_reserves(DAI, USDC) == (1_000000, 4_000000)

    def test_quote_zero(self, exchange):
        with pytest.raises(InsufficientAmount):
            exchange.quote(0, DAI, USDC)

    def test_quote_invalid(self, exchange):
        with pytest.raises(InvalidAmount):
            exchange.quote(-1, DAI, USDC)

    def test_quote_empty_pool(self, exchange):
        with pytest.raises(NoLiquidity):
            exchange.quote(1, DAI, USDT)

    def test_quote_in(self, exchange):
        assert exchange.quote_in(362_644, DAI, USDC) == 100_000

    def test_quote_liquidity(self, exchange):
        assert exchange.quote_liquidity(500_000, DAI, USDC) == 2_000000
        assert exchange.quote_liquidity(2_000000, USDC, DAI) == 500_000

    def test_amounts_out(self, exchange):
        first = constant_product.get_amount_out(100_000, 1_000000, 4_000000)
        second = constant_product.get_amount_out(first, 4_000000, 2_000000)
        assert exchange.get_amounts_out(100_000, [DAI, USDC, WETH]) == [100_000, first, second]

    def test_amounts_in(self, exchange):
        amounts = exchange.get_amounts_in(50_000, [DAI, USDC, WETH])
        assert amounts[-1] == 50_000
        assert exchange.get_amounts_out(amounts[0], [DAI, USDC, WETH])[-1] >= 50_000

    def test_amounts_do_not_mutate(self, exchange):
        exchange.get_amounts_out(100_000, [DAI, USDC, WETH])
        exchange.get_amounts_in(50_000, [DAI, USDC, WETH])
        assert exchange.get_pool(DAI, USDC) == Pool(1_000000, 4_000000, 2_000000)
        assert exchange.get_pool(USDC, WETH) == Pool(4_000000, 2_000000, babylonian_sqrt(8 * 10**12))


class TestPools:
    def test_get_pool_unknown_pair(self, exchange):
        assert exchange.get_pool(DAI, USDT) == Pool()

    def test_pools(self, exchange):
        assert set(exchange.pools()) == {PairKey(DAI, USDC), PairKey(USDC, WETH)}

    def test_pool_copy_is_detached(self, exchange):
        pool = exchange.get_pool(DAI, USDC)
        pool.reserve0 = 0
        assert exchange.get_reserves(DAI, USDC) == (1_000000, 4_000000)

    def test_share_queries(self, exchange):
        assert exchange.share_balance(USDC, DAI, ALICE) == 2_000000
        assert exchange.share_ledger(DAI, USDC) is exchange.share_ledger(USDC, DAI)
        assert exchange.share_ledger(DAI, USDC) is not exchange.share_ledger(USDC, WETH)
        assert exchange.total_shares(DAI, USDC) == exchange.share_ledger(DAI, USDC).total_supply()
