"""API endpoints for the exchange.

Handlers are plain functions: FastAPI runs them in its threadpool, so pool
locks held by one request never block the event loop.
"""

from fastapi import APIRouter, Depends, Query

from pairswap.exchange import Exchange, get_default_exchange
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

# Every engine error is rendered by the handlers in main.py
router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    }
)


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject an exchange with test ledgers:
        app.dependency_overrides[get_exchange] = lambda: exchange

    Returns:
        The exchange instance to serve requests from.
    """
    return get_default_exchange()


@router.post("/liquidity/add")
def add_liquidity(
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AddLiquidityResponse:
    """Deposit both assets of a pair and mint liquidity shares."""
    result = exchange.add_liquidity(
        request.asset_a,
        request.asset_b,
        int(request.amount_a_desired),
        int(request.amount_b_desired),
        int(request.amount_a_min),
        int(request.amount_b_min),
        request.recipient,
        request.deadline,
        sender=request.sender,
    )
    return AddLiquidityResponse(
        amount_a=result.amount_a,
        amount_b=result.amount_b,
        shares=result.shares,
    )


@router.post("/liquidity/remove")
def remove_liquidity(
    request: RemoveLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> RemoveLiquidityResponse:
    """Burn liquidity shares for a pro-rata slice of the pool."""
    result = exchange.remove_liquidity(
        request.asset_a,
        request.asset_b,
        int(request.shares),
        int(request.amount_a_min),
        int(request.amount_b_min),
        request.recipient,
        request.deadline,
        sender=request.sender,
    )
    return RemoveLiquidityResponse(amount_a=result.amount_a, amount_b=result.amount_b)


@router.post("/swap/exact-in")
def swap_exact_in(
    request: SwapExactInRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    """Swap an exact input amount along a path."""
    amounts = exchange.swap_exact_in(
        int(request.amount_in),
        int(request.amount_out_min),
        request.path,
        request.recipient,
        request.deadline,
        sender=request.sender,
    )
    return SwapResponse(amounts=amounts)


@router.post("/swap/exact-out")
def swap_exact_out(
    request: SwapExactOutRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    """Swap for an exact output amount along a path."""
    amounts = exchange.swap_exact_out(
        int(request.amount_out),
        int(request.amount_in_max),
        request.path,
        request.recipient,
        request.deadline,
        sender=request.sender,
    )
    return SwapResponse(amounts=amounts)


@router.get("/quote")
def quote(
    amount_in: int = Query(alias="amountIn", ge=0),
    asset_in: str = Query(alias="assetIn"),
    asset_out: str = Query(alias="assetOut"),
    exchange: Exchange = Depends(get_exchange),
) -> QuoteResponse:
    """Quote a single-hop exact-input swap against current reserves."""
    return QuoteResponse(amount_out=exchange.quote(amount_in, asset_in, asset_out))


@router.get("/price/{asset_a}/{asset_b}")
def price(
    asset_a: str,
    asset_b: str,
    exchange: Exchange = Depends(get_exchange),
) -> PriceResponse:
    """Price of asset_a in units of asset_b, as a fixed-point integer."""
    return PriceResponse(
        price=exchange.price(asset_a, asset_b),
        scale=exchange.config.price_scale,
    )


@router.get("/pools/{asset_a}/{asset_b}")
def pool(
    asset_a: str,
    asset_b: str,
    exchange: Exchange = Depends(get_exchange),
) -> PoolResponse:
    """Reserves and share supply of a pair's pool, in caller order."""
    reserve_a, reserve_b = exchange.get_reserves(asset_a, asset_b)
    return PoolResponse(
        asset_a=asset_a.lower(),
        asset_b=asset_b.lower(),
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_shares=exchange.total_shares(asset_a, asset_b),
    )
