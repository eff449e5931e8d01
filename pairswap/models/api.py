"""Pydantic models for exchange API requests and responses.

Amounts are uint256 decimal strings on the wire; endpoints convert them with
int() before calling the engine.
"""

from pydantic import BaseModel, Field

from pairswap.models.types import Address, Uint256


class _Request(BaseModel):
    model_config = {"populate_by_name": True}


class AddLiquidityRequest(_Request):
    """Deposit into the pool of (assetA, assetB)."""

    sender: Address = Field(description="Account funding the deposit.")
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")
    amount_a_desired: Uint256 = Field(alias="amountADesired")
    amount_b_desired: Uint256 = Field(alias="amountBDesired")
    amount_a_min: Uint256 = Field(default="0", alias="amountAMin")
    amount_b_min: Uint256 = Field(default="0", alias="amountBMin")
    recipient: Address = Field(description="Account receiving the minted shares.")
    deadline: float = Field(
        allow_inf_nan=False,
        description="Unix timestamp after which the request is rejected.",
    )


class RemoveLiquidityRequest(_Request):
    """Burn shares of the pool of (assetA, assetB)."""

    sender: Address = Field(description="Account whose shares are burned.")
    asset_a: Address = Field(alias="assetA")
    asset_b: Address = Field(alias="assetB")
    shares: Uint256
    amount_a_min: Uint256 = Field(default="0", alias="amountAMin")
    amount_b_min: Uint256 = Field(default="0", alias="amountBMin")
    recipient: Address
    deadline: float = Field(allow_inf_nan=False)


class SwapExactInRequest(_Request):
    """Swap an exact input along a path."""

    sender: Address
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out_min: Uint256 = Field(default="0", alias="amountOutMin")
    path: list[Address] = Field(min_length=2)
    recipient: Address
    deadline: float = Field(allow_inf_nan=False)


class SwapExactOutRequest(_Request):
    """Swap for an exact output along a path."""

    sender: Address
    amount_out: Uint256 = Field(alias="amountOut")
    amount_in_max: Uint256 = Field(alias="amountInMax")
    path: list[Address] = Field(min_length=2)
    recipient: Address
    deadline: float = Field(allow_inf_nan=False)


class AddLiquidityResponse(_Request):
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")
    shares: Uint256


class RemoveLiquidityResponse(_Request):
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")


class SwapResponse(_Request):
    amounts: list[Uint256] = Field(description="One amount per path asset, input first.")


class QuoteResponse(_Request):
    amount_out: Uint256 = Field(alias="amountOut")


class PriceResponse(_Request):
    price: Uint256 = Field(description="Price of assetA in assetB, scaled by `scale`.")
    scale: Uint256


class PoolResponse(_Request):
    asset_a: str = Field(alias="assetA")
    asset_b: str = Field(alias="assetB")
    reserve_a: Uint256 = Field(alias="reserveA")
    reserve_b: Uint256 = Field(alias="reserveB")
    total_shares: Uint256 = Field(alias="totalShares")


class ErrorResponse(BaseModel):
    error: str = Field(description="Machine-readable error code.")
    detail: str
