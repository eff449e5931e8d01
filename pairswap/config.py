"""Engine configuration."""

import os
from dataclasses import dataclass

from pairswap.constants import DEFAULT_CUSTODY, FEE_DENOMINATOR, FEE_NUMERATOR, PRICE_SCALE
from pairswap.models.types import normalize_address


@dataclass(frozen=True)
class ExchangeConfig:
    """Centralized configuration for the exchange engine.

    Attributes:
        fee_numerator: Share of the input counted by the swap formula (default: 997)
        fee_denominator: Denominator of the fee fraction (default: 1000)
        price_scale: Fixed-point scale used by price() (default: 1e18)
        custody: Asset Ledger account holding pooled assets
        enforce_uint256: If True, any intermediate value above 2**256-1 is a
            fatal Uint256Overflow instead of silently widening.
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    price_scale: int = PRICE_SCALE
    custody: str = DEFAULT_CUSTODY
    enforce_uint256: bool = True

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], got {self.fee_numerator}"
            )
        if self.price_scale <= 0:
            raise ValueError(f"price_scale must be positive, got {self.price_scale}")
        if not self.custody:
            raise ValueError("custody account must be set")
        object.__setattr__(self, "custody", normalize_address(self.custody))

    @classmethod
    def from_env(cls) -> "ExchangeConfig":
        """Build a config from PAIRSWAP_* environment variables.

        - PAIRSWAP_FEE_NUMERATOR (default: 997)
        - PAIRSWAP_FEE_DENOMINATOR (default: 1000)
        - PAIRSWAP_PRICE_SCALE (default: 10**18)
        - PAIRSWAP_CUSTODY (default: DEFAULT_CUSTODY)
        """
        return cls(
            fee_numerator=int(os.environ.get("PAIRSWAP_FEE_NUMERATOR", FEE_NUMERATOR)),
            fee_denominator=int(os.environ.get("PAIRSWAP_FEE_DENOMINATOR", FEE_DENOMINATOR)),
            price_scale=int(os.environ.get("PAIRSWAP_PRICE_SCALE", PRICE_SCALE)),
            custody=os.environ.get("PAIRSWAP_CUSTODY", DEFAULT_CUSTODY),
        )


# Default configuration instance
DEFAULT_CONFIG = ExchangeConfig()
