"""Random-walk quote simulator and the offline seed quoter."""

from __future__ import annotations

import logging
import math

import numpy as np

from .errors import InvalidQuote, SymbolNotFound
from .interface import ExternalQuoter, TickPolicy
from .models import Quote
from .seed_prices import DEFAULT_SIZE, SEED_QUOTES
from .subscription import canonical_symbol

logger = logging.getLogger(__name__)


class SimulatedTickPolicy(TickPolicy):
    """Placeholder market: every tick is a random walk from the last quote.

    The engine only asks the external quoter for the first quote of a
    subscription. All later quotes come from here, even when the quoter is
    a real feed.

    Each step:
        direction = up or down, 50/50
        point     = uniform in [0, 1), in whole cents
        size      = uniform integer in [1, 100]

        up:   bid + point, ask + point + 0.05, last = previous ask
        down: bid - point, ask - point + 0.05, last = previous bid

    Bid size is ``size`` and ask size is ``size - 1`` in both directions.
    """

    CENT = 0.01
    ASK_DRIFT = 0.05
    MAX_SIZE = 100

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    async def next_quote(self, quote: Quote | None) -> Quote:
        if quote is None:
            raise InvalidQuote("Argument 'quote' is None.")
        if not quote.is_valid:
            raise InvalidQuote(f"Supplied quote for {quote.symbol} is invalid.")
        return self.step(quote)

    def step(self, quote: Quote) -> Quote:
        """Synchronous core of next_quote for an already validated quote."""
        move_up = int(self._rng.integers(1, 11)) % 2 == 0
        size = int(self._rng.integers(1, self.MAX_SIZE + 1))
        point = math.floor(self._rng.random() * 100) * self.CENT

        if move_up:
            bid = quote.bid + point
            ask = quote.ask + point + self.ASK_DRIFT
            last = quote.ask
        else:
            bid = quote.bid - point
            ask = quote.ask - point + self.ASK_DRIFT
            last = quote.bid

        logger.debug(
            "Simulated %s move on %s: %.2f",
            "up" if move_up else "down",
            quote.symbol,
            point,
        )
        return Quote(
            symbol=quote.symbol,
            bid=round(bid, 2),
            bid_size=size,
            ask=round(ask, 2),
            ask_size=size - 1,
            last=last,
        )


class SeedQuoter(ExternalQuoter):
    """ExternalQuoter serving fixed seed quotes, for running without an API key."""

    def __init__(self, seeds: dict[str, tuple[float, float]] | None = None) -> None:
        self._seeds = {
            canonical_symbol(symbol): prices
            for symbol, prices in (SEED_QUOTES if seeds is None else seeds).items()
        }

    async def get_quote(self, symbol: str) -> Quote:
        key = canonical_symbol(symbol)
        prices = self._seeds.get(key)
        if prices is None:
            raise SymbolNotFound(symbol)
        bid, ask = prices
        return Quote(
            symbol=key,
            bid=bid,
            bid_size=DEFAULT_SIZE,
            ask=ask,
            ask_size=DEFAULT_SIZE,
            last=round((bid + ask) / 2, 2),
        )

    def get_symbols(self) -> list[str]:
        """Symbols this quoter can serve."""
        return list(self._seeds)
