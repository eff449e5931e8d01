"""Public operation surface of the exchange engine.

Every mutating operation runs the same two-phase protocol:
1. Guard: deadline, pair identity and amount checks.
2. Lock the pools involved and stage copies of them.
3. Compute and validate every amount against the staged pools, then apply
   the resulting reserve/share deltas to the staged copies.
4. Issue ledger instructions (asset moves, share mint/burn). Each completed
   instruction registers a compensating instruction.
5. Commit the staged pools. If anything in 3-5 fails, completed instructions
   are compensated in reverse order and the staged pools are discarded.

The pool locks are held across the ledger calls, so a ledger that calls back
into the exchange cannot observe or mutate a pool mid-operation; it gets
ReentrantCall instead.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from types import TracebackType
from typing import NamedTuple

import structlog

from pairswap.amm.constant_product import ConstantProduct, amounts_from_hops
from pairswap.config import DEFAULT_CONFIG, ExchangeConfig
from pairswap.errors import ExcessiveInput, InsufficientOutput, NoLiquidity, TransferFailed
from pairswap.events import (
    EventSink,
    LiquidityAdded,
    LiquidityRemoved,
    StructlogEventSink,
    SwapExecuted,
    dispatch,
)
from pairswap.guard import TransactionGuard
from pairswap.ledgers import AssetLedger, Clock, InMemoryAssetLedger, InMemoryShareLedger, ShareLedger
from pairswap.liquidity import LiquidityAccountant
from pairswap.models.types import normalize_address
from pairswap.pairs import PairKey, sort_assets
from pairswap.pools import Pool, PoolStore

logger = structlog.get_logger()


class AddLiquidityResult(NamedTuple):
    amount_a: int
    amount_b: int
    shares: int


class RemoveLiquidityResult(NamedTuple):
    amount_a: int
    amount_b: int


def _orient(a_is_token0: bool, a: int, b: int) -> tuple[int, int]:
    """Map (a, b) in caller order to (token0, token1) order, or back."""
    return (a, b) if a_is_token0 else (b, a)


class Compensations:
    """Undo log for ledger instructions issued during one operation.

    Used as a context manager: if the block raises, every registered
    compensation runs in reverse order before the error propagates. A
    compensation that fails is logged and does not mask the original error.
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, Callable[[], None]]] = []

    def register(self, description: str, action: Callable[[], None]) -> None:
        self._actions.append((description, action))

    def unwind(self) -> None:
        while self._actions:
            description, action = self._actions.pop()
            try:
                action()
            except Exception:
                logger.exception("compensation_failed", action=description)

    def __enter__(self) -> Compensations:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            if self._actions:
                logger.warning(
                    "operation_rolled_back",
                    error=type(exc).__name__,
                    compensations=len(self._actions),
                )
            self.unwind()
        return False


class Exchange:
    """Constant-product exchange over pooled asset pairs.

    Args:
        asset_ledger: Moves underlying assets in and out of custody
        config: Fee, price-scale and custody settings
        clock: Time source for deadlines (default: wall clock)
        share_ledger_factory: Builds the share ledger for a new pool
        store: Pool store (default: a fresh in-memory store)
        sinks: Notification receivers (default: a structlog sink)
    """

    def __init__(
        self,
        asset_ledger: AssetLedger,
        *,
        config: ExchangeConfig = DEFAULT_CONFIG,
        clock: Clock | None = None,
        share_ledger_factory: Callable[[PairKey], ShareLedger] | None = None,
        store: PoolStore | None = None,
        sinks: Iterable[EventSink] | None = None,
    ) -> None:
        self.config = config
        self.asset_ledger = asset_ledger
        self.store = store or PoolStore()
        self.guard = TransactionGuard(clock)
        self.amm = ConstantProduct(
            config.fee_numerator, config.fee_denominator, bounded=config.enforce_uint256
        )
        self.accountant = LiquidityAccountant(bounded=config.enforce_uint256)
        self.sinks: list[EventSink] = list(sinks) if sinks is not None else [StructlogEventSink()]
        self._share_ledger_factory = share_ledger_factory or (lambda _key: InMemoryShareLedger())
        self._share_ledgers: dict[PairKey, ShareLedger] = {}
        self._share_ledgers_lock = threading.Lock()

    @property
    def custody(self) -> str:
        return self.config.custody

    # --- Ledger instructions ---

    def _share_ledger(self, key: PairKey) -> ShareLedger:
        with self._share_ledgers_lock:
            ledger = self._share_ledgers.get(key)
            if ledger is None:
                ledger = self._share_ledger_factory(key)
                self._share_ledgers[key] = ledger
            return ledger

    @staticmethod
    def _instruct(description: str, call: Callable[[], object], *, expect_success: bool) -> None:
        """Run a ledger call under the strict success contract.

        Raises:
            TransferFailed: If the call raises, or (when expect_success) does
                not return exactly True
        """
        try:
            result = call()
        except Exception as err:
            raise TransferFailed(f"{description} raised {type(err).__name__}: {err}") from err
        if expect_success and result is not True:
            raise TransferFailed(f"{description} returned {result!r}")

    def _move_in(self, asset: str, source: str, amount: int, undo: Compensations) -> None:
        ledger = self.asset_ledger
        self._instruct(
            f"move_in {amount} {asset} from {source}",
            lambda: ledger.move_in(asset, source, self.custody, amount),
            expect_success=True,
        )
        undo.register(
            f"return {amount} {asset} to {source}",
            lambda: self._instruct(
                f"move_out {amount} {asset} to {source}",
                lambda: ledger.move_out(asset, source, amount),
                expect_success=True,
            ),
        )

    def _move_out(self, asset: str, destination: str, amount: int, undo: Compensations) -> None:
        ledger = self.asset_ledger
        self._instruct(
            f"move_out {amount} {asset} to {destination}",
            lambda: ledger.move_out(asset, destination, amount),
            expect_success=True,
        )
        undo.register(
            f"reclaim {amount} {asset} from {destination}",
            lambda: self._instruct(
                f"move_in {amount} {asset} from {destination}",
                lambda: ledger.move_in(asset, destination, self.custody, amount),
                expect_success=True,
            ),
        )

    def _mint(self, ledger: ShareLedger, account: str, amount: int, undo: Compensations) -> None:
        self._instruct(
            f"mint {amount} shares to {account}",
            lambda: ledger.mint(account, amount),
            expect_success=False,
        )
        undo.register(f"burn {amount} minted shares", lambda: ledger.burn(account, amount))

    def _burn(self, ledger: ShareLedger, account: str, amount: int, undo: Compensations) -> None:
        self._instruct(
            f"burn {amount} shares from {account}",
            lambda: ledger.burn(account, amount),
            expect_success=False,
        )
        undo.register(f"re-mint {amount} burned shares", lambda: ledger.mint(account, amount))

    def _emit(self, event: LiquidityAdded | LiquidityRemoved | SwapExecuted) -> None:
        dispatch(self.sinks, event)

    # --- Mutating operations ---

    def add_liquidity(
        self,
        asset_a: str,
        asset_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> AddLiquidityResult:
        """Deposit both assets of a pair and mint shares to ``recipient``.

        An empty pool takes the desired amounts exactly and mints
        sqrt(amount_a * amount_b) shares. A funded pool takes amounts at its
        current ratio, never more than desired, and mints the more
        conservative pro-rata share count.

        Returns:
            (amount_a, amount_b, shares) with amounts in caller order

        Raises:
            Expired, InvalidPair, InvalidAmount: Guard failures
            InsufficientAmount: An accepted amount is below its minimum
            ZeroLiquidityMinted: The deposit is too small to mint a share
            TransferFailed: A ledger instruction failed; nothing was changed
        """
        key = self.guard.check(
            deadline,
            asset_a,
            asset_b,
            amount_a_desired=amount_a_desired,
            amount_b_desired=amount_b_desired,
            amount_a_min=amount_a_min,
            amount_b_min=amount_b_min,
        )
        a_is_token0 = key.is_token0(asset_a)
        desired0, desired1 = _orient(a_is_token0, amount_a_desired, amount_b_desired)
        min0, min1 = _orient(a_is_token0, amount_a_min, amount_b_min)
        shares_ledger = self._share_ledger(key)

        with self.store.transaction([key]) as staged, Compensations() as undo:
            pool = staged[key]
            deposit = self.accountant.compute_deposit(pool, desired0, desired1, min0, min1)
            self.accountant.apply_deposit(pool, deposit)
            pool.check_invariant()

            self._move_in(key.token0, sender, deposit.amount0, undo)
            self._move_in(key.token1, sender, deposit.amount1, undo)
            self._mint(shares_ledger, recipient, deposit.shares, undo)

        amount_a, amount_b = _orient(a_is_token0, deposit.amount0, deposit.amount1)
        logger.info(
            "liquidity_added",
            pair=str(key),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=deposit.shares,
        )
        self._emit(
            LiquidityAdded(
                sender=normalize_address(sender),
                recipient=normalize_address(recipient),
                token0=key.token0,
                token1=key.token1,
                amount0=deposit.amount0,
                amount1=deposit.amount1,
                shares=deposit.shares,
            )
        )
        return AddLiquidityResult(amount_a, amount_b, deposit.shares)

    def remove_liquidity(
        self,
        asset_a: str,
        asset_b: str,
        shares: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> RemoveLiquidityResult:
        """Burn ``sender``'s shares and pay the pro-rata reserves to ``recipient``.

        Returns:
            (amount_a, amount_b) in caller order, each rounded down

        Raises:
            Expired, InvalidPair, InvalidAmount: Guard failures
            InsufficientShares: sender holds fewer than ``shares``
            InsufficientAmount: A returned amount is below its minimum
            TransferFailed: A ledger instruction failed; nothing was changed
        """
        key = self.guard.check(
            deadline,
            asset_a,
            asset_b,
            shares=shares,
            amount_a_min=amount_a_min,
            amount_b_min=amount_b_min,
        )
        a_is_token0 = key.is_token0(asset_a)
        min0, min1 = _orient(a_is_token0, amount_a_min, amount_b_min)
        shares_ledger = self._share_ledger(key)

        with self.store.transaction([key]) as staged, Compensations() as undo:
            pool = staged[key]
            balance = shares_ledger.balance_of(sender)
            withdrawal = self.accountant.compute_withdrawal(pool, shares, balance, min0, min1)
            self.accountant.apply_withdrawal(pool, withdrawal)
            pool.check_invariant()

            self._burn(shares_ledger, sender, shares, undo)
            self._move_out(key.token0, recipient, withdrawal.amount0, undo)
            self._move_out(key.token1, recipient, withdrawal.amount1, undo)

        amount_a, amount_b = _orient(a_is_token0, withdrawal.amount0, withdrawal.amount1)
        logger.info(
            "liquidity_removed",
            pair=str(key),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        self._emit(
            LiquidityRemoved(
                sender=normalize_address(sender),
                recipient=normalize_address(recipient),
                token0=key.token0,
                token1=key.token1,
                amount0=withdrawal.amount0,
                amount1=withdrawal.amount1,
                shares=shares,
            )
        )
        return RemoveLiquidityResult(amount_a, amount_b)

    def swap_exact_in(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[str],
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> list[int]:
        """Swap an exact input along ``path``, hop by hop.

        Only the final output is checked against ``amount_out_min``.

        Returns:
            Amounts per path asset: [amount_in, hop1_out, ..., final_out]

        Raises:
            Expired, InvalidPair, InvalidAmount: Guard failures
            NoLiquidity: A pool along the path is empty
            InsufficientOutput: Final output below the minimum, or a hop yields zero
            TransferFailed: A ledger instruction failed; nothing was changed
        """
        self.guard.check_deadline(deadline)
        keys = self.guard.check_path(path)
        self.guard.check_amount("amount_in", amount_in)
        self.guard.check_amount("amount_out_min", amount_out_min)

        with self.store.transaction(keys) as staged, Compensations() as undo:
            hops = self.amm.swap_exact_in(staged, path, amount_in)
            amounts = amounts_from_hops(hops)
            if amounts[-1] < amount_out_min:
                logger.warning(
                    "swap_below_minimum",
                    amount_out=amounts[-1],
                    amount_out_min=amount_out_min,
                )
                raise InsufficientOutput(
                    f"Output {amounts[-1]} below minimum {amount_out_min}"
                )
            for pool in staged.values():
                pool.check_invariant()

            self._move_in(path[0], sender, amounts[0], undo)
            self._move_out(path[-1], recipient, amounts[-1], undo)

        self._after_swap(sender, recipient, path, amounts)
        return amounts

    def swap_exact_out(
        self,
        amount_out: int,
        amount_in_max: int,
        path: list[str],
        recipient: str,
        deadline: float,
        *,
        sender: str,
    ) -> list[int]:
        """Swap for an exact final output, spending at most ``amount_in_max``.

        Returns:
            Amounts per path asset: [amount_in, hop1_out, ..., amount_out]

        Raises:
            Expired, InvalidPair, InvalidAmount: Guard failures
            NoLiquidity: A pool along the path is empty
            InsufficientLiquidity: A requested output is not below its reserve
            ExcessiveInput: The required input exceeds ``amount_in_max``
            TransferFailed: A ledger instruction failed; nothing was changed
        """
        self.guard.check_deadline(deadline)
        keys = self.guard.check_path(path)
        self.guard.check_amount("amount_out", amount_out)
        self.guard.check_amount("amount_in_max", amount_in_max)

        with self.store.transaction(keys) as staged, Compensations() as undo:
            hops = self.amm.swap_exact_out(staged, path, amount_out)
            amounts = amounts_from_hops(hops)
            if amounts[0] > amount_in_max:
                logger.warning(
                    "swap_above_maximum",
                    amount_in=amounts[0],
                    amount_in_max=amount_in_max,
                )
                raise ExcessiveInput(f"Input {amounts[0]} above maximum {amount_in_max}")
            for pool in staged.values():
                pool.check_invariant()

            self._move_in(path[0], sender, amounts[0], undo)
            self._move_out(path[-1], recipient, amounts[-1], undo)

        self._after_swap(sender, recipient, path, amounts)
        return amounts

    def _after_swap(self, sender: str, recipient: str, path: list[str], amounts: list[int]) -> None:
        normalized = tuple(normalize_address(asset) for asset in path)
        logger.info(
            "swap_executed",
            path=[asset[-8:] for asset in normalized],
            amount_in=amounts[0],
            amount_out=amounts[-1],
            hops=len(path) - 1,
        )
        self._emit(
            SwapExecuted(
                sender=normalize_address(sender),
                recipient=normalize_address(recipient),
                path=normalized,
                amounts=tuple(amounts),
            )
        )

    # --- Read-only operations ---

    def get_pool(self, asset_a: str, asset_b: str) -> Pool:
        """Snapshot of the committed pool for a pair (zeros if never funded)."""
        return self.store.get(sort_assets(asset_a, asset_b))

    def pools(self) -> dict[PairKey, Pool]:
        return self.store.snapshot()

    def get_reserves(self, asset_a: str, asset_b: str) -> tuple[int, int]:
        """Reserves of (asset_a, asset_b), in caller order."""
        key = sort_assets(asset_a, asset_b)
        return self.store.get(key).get_reserves(key.is_token0(asset_a))

    def quote(self, amount_in: int, asset_in: str, asset_out: str) -> int:
        """Output of swapping ``amount_in`` of asset_in for asset_out right now."""
        self.guard.check_amount("amount_in", amount_in)
        reserve_in, reserve_out = self.get_reserves(asset_in, asset_out)
        return self.amm.get_amount_out(amount_in, reserve_in, reserve_out)

    def quote_in(self, amount_out: int, asset_in: str, asset_out: str) -> int:
        """Input of asset_in needed to receive ``amount_out`` of asset_out right now."""
        self.guard.check_amount("amount_out", amount_out)
        reserve_in, reserve_out = self.get_reserves(asset_in, asset_out)
        return self.amm.get_amount_in(amount_out, reserve_in, reserve_out)

    def quote_liquidity(self, amount_a: int, asset_a: str, asset_b: str) -> int:
        """Amount of asset_b matching ``amount_a`` of asset_a at the pool ratio."""
        self.guard.check_amount("amount_a", amount_a)
        reserve_a, reserve_b = self.get_reserves(asset_a, asset_b)
        return self.accountant.quote(amount_a, reserve_a, reserve_b)

    def get_amounts_out(self, amount_in: int, path: list[str]) -> list[int]:
        """Per-asset amounts of an exact-input swap along path, without executing it."""
        self.guard.check_amount("amount_in", amount_in)
        keys = self.guard.check_path(path)
        pools = {key: self.store.get(key) for key in set(keys)}
        return amounts_from_hops(self.amm.swap_exact_in(pools, path, amount_in))

    def get_amounts_in(self, amount_out: int, path: list[str]) -> list[int]:
        """Per-asset amounts of an exact-output swap along path, without executing it."""
        self.guard.check_amount("amount_out", amount_out)
        keys = self.guard.check_path(path)
        pools = {key: self.store.get(key) for key in set(keys)}
        return amounts_from_hops(self.amm.swap_exact_out(pools, path, amount_out))

    def price(self, asset_a: str, asset_b: str) -> int:
        """Price of asset_a in units of asset_b, scaled by ``config.price_scale``.

        Raises:
            NoLiquidity: If the pool is empty
        """
        reserve_a, reserve_b = self.get_reserves(asset_a, asset_b)
        if reserve_a == 0 or reserve_b == 0:
            raise NoLiquidity(f"Pool {sort_assets(asset_a, asset_b)} has no liquidity")
        return reserve_b * self.config.price_scale // reserve_a

    def share_ledger(self, asset_a: str, asset_b: str) -> ShareLedger:
        """The share ledger of a pair's pool (created on first use)."""
        return self._share_ledger(sort_assets(asset_a, asset_b))

    def share_balance(self, asset_a: str, asset_b: str, account: str) -> int:
        return self.share_ledger(asset_a, asset_b).balance_of(account)

    def total_shares(self, asset_a: str, asset_b: str) -> int:
        return self.get_pool(asset_a, asset_b).total_shares


# Process-wide exchange used by the HTTP service
_default_exchange: Exchange | None = None
_default_exchange_lock = threading.Lock()


def _create_default_exchange() -> Exchange:
    """Create an exchange over in-memory ledgers, configured from the environment."""
    config = ExchangeConfig.from_env()
    return Exchange(InMemoryAssetLedger(config.custody), config=config)


def get_default_exchange() -> Exchange:
    global _default_exchange
    with _default_exchange_lock:
        if _default_exchange is None:
            _default_exchange = _create_default_exchange()
        return _default_exchange
