"""Structured notifications emitted after an operation commits.

Delivery is fire-and-forget: a sink that raises is logged and skipped, and
never changes the outcome of the operation that produced the event.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiquidityAdded:
    sender: str
    recipient: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    shares: int

    name = "liquidity_added"


@dataclass(frozen=True)
class LiquidityRemoved:
    sender: str
    recipient: str
    token0: str
    token1: str
    amount0: int
    amount1: int
    shares: int

    name = "liquidity_removed"


@dataclass(frozen=True)
class SwapExecuted:
    sender: str
    recipient: str
    path: tuple[str, ...]
    amounts: tuple[int, ...]

    name = "swap_executed"


Event = LiquidityAdded | LiquidityRemoved | SwapExecuted


@runtime_checkable
class EventSink(Protocol):
    """Receiver of exchange notifications."""

    def publish(self, event: Event) -> None: ...


class StructlogEventSink:
    """Logs every event at info level."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger("pairswap.events")

    def publish(self, event: Event) -> None:
        self._logger.info(event.name, **asdict(event))


class RecordingEventSink:
    """Keeps every event in memory, in delivery order."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def publish(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def dispatch(sinks: Iterable[EventSink], event: Event) -> None:
    """Deliver an event to every sink, logging and skipping failures."""
    for sink in sinks:
        try:
            sink.publish(event)
        except Exception:
            logger.exception(
                "event_delivery_failed",
                event_name=event.name,
                sink=type(sink).__name__,
            )
