"""Integer helpers shared by the liquidity and swap math."""

from pairswap.safe_int import UINT256_MAX


def babylonian_sqrt(y: int) -> int:
    """Integer square root by the Babylonian method.

    Returns the largest ``z`` with ``z * z <= y``. Converges in O(log y)
    iterations. ``sqrt(0) == 0`` and ``sqrt(1..3) == 1``.

    Raises:
        ValueError: If y is negative
    """
    if y < 0:
        raise ValueError(f"Square root of negative value: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def is_uint256(value: object) -> bool:
    """Check whether value is a plain int in [0, 2**256 - 1]."""
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return 0 <= value <= UINT256_MAX
