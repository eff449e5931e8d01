"""Pool state package.

Provides the Pool record and the PoolStore that serializes access to it.
"""

from .pool import Pool
from .store import PoolStore

__all__ = [
    "Pool",
    "PoolStore",
]
