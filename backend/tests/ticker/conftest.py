"""Fixtures for ticker tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from quotefeed.ticker.engine import TickerEngine
from quotefeed.ticker.errors import SymbolNotFound
from quotefeed.ticker.interface import EventSink, ExternalQuoter
from quotefeed.ticker.models import Quote


class FakeQuoter(ExternalQuoter):
    """ExternalQuoter serving canned quotes and recording every request."""

    def __init__(
        self,
        quotes: dict[str, Quote] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.quotes = {symbol.upper(): quote for symbol, quote in (quotes or {}).items()}
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        try:
            return self.quotes[symbol.upper()]
        except KeyError:
            raise SymbolNotFound(symbol) from None


class RecordingSink(EventSink):
    """EventSink that keeps (name, payload) pairs in emission order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def emit(self, event_name: str, payload: Any) -> None:
        self.events.append((event_name, payload))

    def named(self, event_name: str) -> list[Any]:
        return [payload for name, payload in self.events if name == event_name]


def make_quote(symbol: str = "AAPL", bid: float = 100.00, ask: float = 100.10) -> Quote:
    return Quote(symbol=symbol, bid=bid, bid_size=100, ask=ask, ask_size=100, last=bid)


async def _drain(engine: TickerEngine) -> None:
    """Wait for every update the engine has issued so far."""
    while engine._updates:
        await asyncio.gather(*list(engine._updates), return_exceptions=True)


@pytest.fixture
def drain():
    return _drain


@pytest.fixture
def quoter() -> FakeQuoter:
    return FakeQuoter(
        {
            "AAPL": make_quote("AAPL", 190.00, 190.05),
            "MSFT": make_quote("MSFT", 420.00, 420.10),
            "XYZ": Quote("XYZ", 10, 100, 10.05, 99, 10),
        }
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest_asyncio.fixture
async def engine(quoter: FakeQuoter, sink: RecordingSink):
    """Engine with the default one second interval, so only manual ticks run."""
    engine = TickerEngine(quoter, event_sink=sink)
    yield engine
    await engine.aclose()
