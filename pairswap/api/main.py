"""FastAPI application for the exchange.

Note: Authentication and rate limiting are not implemented at the application
level. They belong to the infrastructure layer in front of the service.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pairswap import __version__
from pairswap.api.endpoints import router
from pairswap.errors import ExchangeError, ReentrantCall, TransferFailed
from pairswap.logging_config import configure_logging
from pairswap.safe_int import SafeIntError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("PAIRSWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("PAIRSWAP_PORT", "8000"))
DEBUG = os.environ.get("PAIRSWAP_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="pairswap",
    description="Constant-product exchange engine",
    version=__version__,
)


def _status_for(exc: ExchangeError) -> int:
    if isinstance(exc, ReentrantCall):
        return 409
    if isinstance(exc, TransferFailed):
        return 502
    return 400


@app.exception_handler(ExchangeError)
async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    """Return the error's code and message instead of a 500."""
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=_status_for(exc),
        content={"error": exc.code, "detail": str(exc)},
    )


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    logger.warning("arithmetic_error", path=request.url.path, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": "ARITHMETIC", "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - PAIRSWAP_HOST: Host to bind to (default: 0.0.0.0)
    - PAIRSWAP_PORT: Port to bind to (default: 8000)
    - PAIRSWAP_DEBUG: Enable debug logging and reload mode (default: false)
    """
    configure_logging(debug=DEBUG)
    uvicorn.run(
        "pairswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
