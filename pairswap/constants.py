"""Engine constants.

Centralizes the fee parameters, price scale and well-known addresses.
"""

from pairswap.models.types import is_valid_address

# Null asset identifier; never a valid side of a pair
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Fee-adjusted multiplier for the swap formula: 997/1000 keeps 0.3% of the input
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Fixed-point scale for price() (1e18)
PRICE_SCALE = 10**18


def _validate_address(name: str, address: str) -> str:
    """Validate and return an address, raising ValueError for typos."""
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Account that holds pooled assets in the Asset Ledger
DEFAULT_CUSTODY = _validate_address("custody", "0x00000000000000000000000000000000000c0575")
