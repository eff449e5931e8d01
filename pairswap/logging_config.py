"""structlog configuration for the exchange service."""

import logging

import structlog


def configure_logging(debug: bool = False, json: bool = False) -> None:
    """Configure structlog for console or JSON output.

    Args:
        debug: Emit debug events (pool locking, per-hop quotes)
        json: Render JSON lines instead of the developer console format
    """
    log_level = logging.DEBUG if debug else logging.INFO
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
