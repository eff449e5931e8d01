"""Exchange error classes.

Each error carries a short machine-readable ``code`` that the HTTP layer
returns to clients. Every error aborts the whole operation; engine state is
left exactly as it was before the operation began.
"""


class ExchangeError(Exception):
    """Base error for exchange operations."""

    code = "EXCHANGE_ERROR"


class Expired(ExchangeError):
    """The caller-supplied deadline is before the current processing time."""

    code = "EXPIRED"


class InvalidPair(ExchangeError):
    """The two assets do not form a valid pair."""

    code = "INVALID_PAIR"


class IdenticalAssets(InvalidPair):
    """Both sides of the pair are the same asset."""

    code = "IDENTICAL_ASSETS"


class ZeroAddress(InvalidPair):
    """One side of the pair is the null asset identifier."""

    code = "ZERO_ADDRESS"


class InvalidPath(InvalidPair):
    """A swap path is too short, or revisits a pool on an exact-output swap."""

    code = "INVALID_PATH"


class NoLiquidity(ExchangeError):
    """The pool for a pair holds no reserves."""

    code = "NO_LIQUIDITY"


class InvalidAmount(ExchangeError, ValueError):
    """An amount is not a uint256 integer, or a deadline is not a real number."""

    code = "INVALID_AMOUNT"


class InsufficientAmount(ExchangeError):
    """An accepted or desired amount breaches the caller's floor."""

    code = "INSUFFICIENT_AMOUNT"


class InsufficientLiquidityBurned(InsufficientAmount):
    """Burning the requested shares would return nothing on one side."""

    code = "INSUFFICIENT_LIQUIDITY_BURNED"


class ZeroLiquidityMinted(ExchangeError):
    """A deposit would mint zero shares."""

    code = "ZERO_LIQUIDITY_MINTED"


class InsufficientShares(ExchangeError):
    """The caller holds fewer shares than requested to burn."""

    code = "INSUFFICIENT_SHARES"


class InsufficientOutput(ExchangeError):
    """Swap output is zero or below the caller's minimum."""

    code = "INSUFFICIENT_OUTPUT"


class ExcessiveInput(ExchangeError):
    """Exact-output swap requires more input than the caller's maximum."""

    code = "EXCESSIVE_INPUT"


class InsufficientLiquidity(ExchangeError):
    """A computed output would drain or exceed the available reserve."""

    code = "INSUFFICIENT_LIQUIDITY"


class TransferFailed(ExchangeError):
    """An Asset Ledger or Share Ledger call did not succeed."""

    code = "TRANSFER_FAILED"


class ReentrantCall(ExchangeError):
    """A pool was re-entered by the thread already mutating it."""

    code = "LOCKED"


class PoolInvariantError(ExchangeError):
    """A staged pool has zero reserves with shares outstanding, or vice versa."""

    code = "POOL_INVARIANT"
