"""Exceptions raised by the ticker subsystem."""

from __future__ import annotations


class TickerError(Exception):
    """Base class for all ticker errors."""


class InvalidSubscriptionSeed(TickerError, ValueError):
    """A subscription was built from a missing or invalid quote."""


class MissingQuoter(TickerError, ValueError):
    """The engine was constructed without an external quoter."""


class InvalidSymbol(TickerError, LookupError):
    """A symbol could not be resolved to an initial quote.

    Catch this to handle every subscribe failure. The subclasses tell an
    unknown symbol apart from an upstream that could not answer.
    """

    def __init__(self, symbol: str, message: str = "Invalid stock symbol") -> None:
        super().__init__(f"{message}: {symbol}")
        self.symbol = symbol


class SymbolNotFound(InvalidSymbol):
    """The quoter does not know the symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(symbol, "Unknown stock symbol")


class QuoteSourceUnavailable(InvalidSymbol):
    """The quoter failed for a reason other than an unknown symbol.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, symbol: str) -> None:
        super().__init__(symbol, "Quote source unavailable for symbol")


class InvalidQuote(TickerError, ValueError):
    """An update was requested for a missing or invalid quote."""


class EngineClosed(TickerError, RuntimeError):
    """The engine was closed and takes no new subscriptions."""
