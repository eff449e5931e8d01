"""Pytest configuration and fixtures."""

import pytest

from pairswap.events import RecordingEventSink
from pairswap.exchange import Exchange
from tests.helpers import ALICE, BOB, CAROL, FixedClock, ScriptedAssetLedger, make_exchange


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def exchange_parts(
    clock: FixedClock,
) -> tuple[Exchange, ScriptedAssetLedger, RecordingEventSink]:
    """Exchange, its asset ledger and its event recorder, with funded accounts."""
    return make_exchange(clock=clock, accounts=(ALICE, BOB, CAROL))


@pytest.fixture
def exchange(exchange_parts) -> Exchange:
    return exchange_parts[0]


@pytest.fixture
def ledger(exchange_parts) -> ScriptedAssetLedger:
    return exchange_parts[1]


@pytest.fixture
def events(exchange_parts) -> RecordingEventSink:
    return exchange_parts[2]
