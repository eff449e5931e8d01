"""AMM (Automated Market Maker) pricing and swap execution."""

from pairswap.amm.base import AMM, SwapResult
from pairswap.amm.constant_product import ConstantProduct, amounts_from_hops, constant_product

__all__ = [
    # Base classes
    "AMM",
    "SwapResult",
    # Constant product
    "ConstantProduct",
    "constant_product",
    "amounts_from_hops",
]
