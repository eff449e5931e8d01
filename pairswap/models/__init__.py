"""Pydantic models for the exchange HTTP API."""

from pairswap.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ErrorResponse,
    PoolResponse,
    PriceResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapExactInRequest,
    SwapExactOutRequest,
    SwapResponse,
)
from pairswap.models.types import Address, Uint256

__all__ = [
    # Types
    "Address",
    "Uint256",
    # Requests
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "SwapExactInRequest",
    "SwapExactOutRequest",
    # Responses
    "AddLiquidityResponse",
    "RemoveLiquidityResponse",
    "SwapResponse",
    "QuoteResponse",
    "PriceResponse",
    "PoolResponse",
    "ErrorResponse",
]
