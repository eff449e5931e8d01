"""Pool store with per-pair locking.

The store maps canonical pair keys to Pool records. Writers go through
``transaction()``, which locks only the pools it names, hands out staged
copies, and commits them when the block exits cleanly. Unrelated pairs
proceed concurrently; an exception inside the block discards every staged
change.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import structlog

from pairswap.errors import ReentrantCall
from pairswap.pairs import PairKey
from pairswap.pools.pool import Pool

logger = structlog.get_logger()


class PoolStore:
    """Keyed store of Pool records with atomic read-modify-write per key.

    A pool exists implicitly (all fields zero) the first time its key is
    referenced and is never removed.
    """

    def __init__(self) -> None:
        self._pools: dict[PairKey, Pool] = {}
        self._locks: dict[PairKey, threading.Lock] = {}
        # Thread ident currently holding each pool lock
        self._owners: dict[PairKey, int] = {}
        # Guards creation of per-key locks, never held during a transaction
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: PairKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def is_held_by_current_thread(self, key: PairKey) -> bool:
        return self._owners.get(key) == threading.get_ident()

    @contextmanager
    def transaction(self, keys: Iterable[PairKey]) -> Iterator[dict[PairKey, Pool]]:
        """Lock the given pools and yield staged copies for mutation.

        Locks are taken in canonical key order so that multi-pool operations
        cannot deadlock against each other. Staged pools are validated and
        written back only if the block completes without raising.

        Raises:
            ReentrantCall: If the current thread already holds one of the pools
            PoolInvariantError: If a staged pool is inconsistent at commit
        """
        ordered = sorted(set(keys))
        for key in ordered:
            if self.is_held_by_current_thread(key):
                raise ReentrantCall(f"Pool {key} is locked by an operation in progress")

        me = threading.get_ident()
        acquired: list[PairKey] = []
        try:
            for key in ordered:
                self._lock_for(key).acquire()
                self._owners[key] = me
                acquired.append(key)
            logger.debug("pool_lock_acquired", pools=[str(k) for k in ordered])

            staged = {key: self._pools.get(key, Pool()).copy() for key in ordered}
            yield staged

            for pool in staged.values():
                pool.check_invariant()
            self._pools.update(staged)
        finally:
            for key in reversed(acquired):
                del self._owners[key]
                self._locks[key].release()

    def get(self, key: PairKey) -> Pool:
        """Return a copy of the last committed state of a pool.

        Reads never observe staged changes. When the current thread is the
        one mutating the pool, the committed state is returned without
        waiting on its own lock.
        """
        if self.is_held_by_current_thread(key):
            return self._pools.get(key, Pool()).copy()
        with self._lock_for(key):
            return self._pools.get(key, Pool()).copy()

    def snapshot(self) -> dict[PairKey, Pool]:
        """Return copies of every pool that has ever been committed."""
        keys = list(self._pools)
        return {key: self.get(key) for key in keys}

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, key: object) -> bool:
        return key in self._pools
