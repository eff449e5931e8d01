"""Collaborator interfaces consumed by the exchange, with in-memory versions.

The engine never moves assets or balances itself. It issues instructions to:
- an Asset Ledger, which moves underlying assets between accounts and the
  exchange's custody account and reports success or failure;
- a Share Ledger per pool, a plain fungible-balance ledger for liquidity shares;
- a Clock, read only by the transaction guard.

The in-memory implementations are thread-safe and back the HTTP service and
the tests.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from pairswap.models.types import normalize_address

logger = structlog.get_logger()


@runtime_checkable
class AssetLedger(Protocol):
    """Moves underlying assets into and out of exchange custody."""

    def move_in(self, asset: str, source: str, destination: str, amount: int) -> bool:
        """Move ``amount`` of ``asset`` from ``source`` to ``destination``."""
        ...

    def move_out(self, asset: str, destination: str, amount: int) -> bool:
        """Move ``amount`` of ``asset`` out of custody to ``destination``."""
        ...


@runtime_checkable
class ShareLedger(Protocol):
    """Fungible balance ledger for one pool's liquidity shares."""

    def mint(self, account: str, amount: int) -> None: ...

    def burn(self, account: str, amount: int) -> None: ...

    def balance_of(self, account: str) -> int: ...

    def total_supply(self) -> int: ...


@runtime_checkable
class Clock(Protocol):
    """Source of the current processing time, in seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time (Unix seconds)."""

    def now(self) -> float:
        return time.time()


class InMemoryAssetLedger:
    """Asset balances keyed by (asset, account).

    ``move_out`` always draws from the custody account. Moves that would
    overdraw the source return False and change nothing.
    """

    def __init__(self, custody: str) -> None:
        self.custody = normalize_address(custody)
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def credit(self, asset: str, account: str, amount: int) -> None:
        """Create ``amount`` of ``asset`` in ``account`` (funding outside the exchange)."""
        if amount < 0:
            raise ValueError(f"Cannot credit negative amount: {amount}")
        with self._lock:
            self._balances[(normalize_address(asset), normalize_address(account))] += amount

    def balance_of(self, asset: str, account: str) -> int:
        with self._lock:
            return self._balances.get((normalize_address(asset), normalize_address(account)), 0)

    def _move(self, asset: str, source: str, destination: str, amount: int) -> bool:
        if amount < 0:
            return False
        src = (normalize_address(asset), normalize_address(source))
        dst = (normalize_address(asset), normalize_address(destination))
        with self._lock:
            if self._balances.get(src, 0) < amount:
                logger.debug(
                    "asset_move_rejected",
                    asset=src[0][-8:],
                    source=src[1][-8:],
                    amount=amount,
                    balance=self._balances.get(src, 0),
                )
                return False
            self._balances[src] -= amount
            self._balances[dst] += amount
        return True

    def move_in(self, asset: str, source: str, destination: str, amount: int) -> bool:
        return self._move(asset, source, destination, amount)

    def move_out(self, asset: str, destination: str, amount: int) -> bool:
        return self._move(asset, self.custody, destination, amount)


class InMemoryShareLedger:
    """Liquidity share balances for a single pool."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = defaultdict(int)
        self._supply = 0
        self._lock = threading.Lock()

    def mint(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount: {amount}")
        with self._lock:
            self._balances[normalize_address(account)] += amount
            self._supply += amount

    def burn(self, account: str, amount: int) -> None:
        """Destroy shares held by account.

        Raises:
            ValueError: If amount is negative or exceeds the account's balance
        """
        account_norm = normalize_address(account)
        with self._lock:
            balance = self._balances.get(account_norm, 0)
            if amount < 0 or amount > balance:
                raise ValueError(f"Cannot burn {amount} shares from balance {balance}")
            self._balances[account_norm] = balance - amount
            self._supply -= amount

    def transfer(self, owner: str, recipient: str, amount: int) -> None:
        """Move shares between accounts. Supply is unchanged.

        Raises:
            ValueError: If amount is negative or exceeds the owner's balance
        """
        owner_norm = normalize_address(owner)
        with self._lock:
            balance = self._balances.get(owner_norm, 0)
            if amount < 0 or amount > balance:
                raise ValueError(f"Cannot transfer {amount} shares from balance {balance}")
            self._balances[owner_norm] = balance - amount
            self._balances[normalize_address(recipient)] += amount

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(normalize_address(account), 0)

    def total_supply(self) -> int:
        with self._lock:
            return self._supply
