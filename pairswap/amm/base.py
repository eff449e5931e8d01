"""Base classes for AMM implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pairswap.pairs import PairKey


@dataclass(frozen=True)
class SwapResult:
    """Result of one hop through a pool."""

    pair: PairKey
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int


class AMM(ABC):
    """Pricing curve of a two-asset pool."""

    @abstractmethod
    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount for a given input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Output token amount
        """
        ...

    @abstractmethod
    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate required input for a desired output.

        Args:
            amount_out: Desired output token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool

        Returns:
            Required input token amount
        """
        ...
