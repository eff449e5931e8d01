"""Integer math helpers for pool accounting."""

from pairswap.math.integer import babylonian_sqrt, is_uint256

__all__ = ["babylonian_sqrt", "is_uint256"]
