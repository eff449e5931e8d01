"""Pair key normalization.

A pool belongs to an unordered pair of assets. Every operation that touches a
pool first maps its two asset identifiers to the canonical ``(token0, token1)``
key, ordered by plain string comparison of the normalized identifiers, so a
pair and its reverse always address the same pool.
"""

from __future__ import annotations

from typing import NamedTuple

from pairswap.constants import ZERO_ADDRESS
from pairswap.errors import IdenticalAssets, InvalidPath, ZeroAddress
from pairswap.models.types import normalize_address


class PairKey(NamedTuple):
    """Canonical ordered pair: token0 sorts strictly before token1."""

    token0: str
    token1: str

    def __str__(self) -> str:
        return f"{self.token0}/{self.token1}"

    def is_token0(self, asset: str) -> bool:
        """Whether asset is the smaller side of the pair.

        Raises:
            ValueError: If asset is not in the pair
        """
        asset_norm = normalize_address(asset)
        if asset_norm == self.token0:
            return True
        if asset_norm == self.token1:
            return False
        raise ValueError(f"Asset {asset} not in pair {self}")


def is_null_asset(asset: str | None) -> bool:
    """The null identifier is None, an empty string, or the zero address."""
    if asset is None:
        return True
    normalized = normalize_address(asset)
    return normalized == "" or normalized == ZERO_ADDRESS


def sort_assets(asset_a: str | None, asset_b: str | None) -> PairKey:
    """Return the canonical key for an unordered pair.

    Raises:
        IdenticalAssets: If both identifiers normalize to the same asset
        ZeroAddress: If either identifier is null
    """
    if is_null_asset(asset_a) or is_null_asset(asset_b):
        raise ZeroAddress(f"Null asset in pair ({asset_a}, {asset_b})")
    assert asset_a is not None and asset_b is not None
    a = normalize_address(asset_a)
    b = normalize_address(asset_b)
    if a == b:
        raise IdenticalAssets(f"Identical assets: {asset_a}")
    return PairKey(a, b) if a < b else PairKey(b, a)


def path_keys(path: list[str]) -> list[PairKey]:
    """Return the canonical key of every hop along a swap path.

    Raises:
        InvalidPath: If the path has fewer than two assets
        IdenticalAssets / ZeroAddress: If any hop is not a valid pair
    """
    if len(path) < 2:
        raise InvalidPath(f"Path needs at least two assets, got {len(path)}")
    return [sort_assets(path[i], path[i + 1]) for i in range(len(path) - 1)]
