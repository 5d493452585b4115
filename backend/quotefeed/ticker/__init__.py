"""Live per-symbol quote ticker.

Public API:
    Quote               - Immutable bid/ask/last snapshot dataclass
    Subscription        - A symbol's current quote and subscriber count
    TickerEngine        - Reference-counted subscriptions refreshed on a timer
    EventHub            - Per-engine publish/subscribe channel for tick/error events
    ExternalQuoter      - Abstract source of initial quotes
    TickPolicy          - Abstract producer of per-tick quote updates
    SimulatedTickPolicy - Random-walk TickPolicy
    SeedQuoter          - Offline ExternalQuoter backed by seed quotes
    create_ticker_engine - Factory that picks the quoter from the environment
    create_stream_router - FastAPI router factory for the SSE endpoint
"""

from .engine import TickerEngine
from .errors import (
    EngineClosed,
    InvalidQuote,
    InvalidSubscriptionSeed,
    InvalidSymbol,
    MissingQuoter,
    QuoteSourceUnavailable,
    SymbolNotFound,
    TickerError,
)
from .events import ERROR, TICK, EventHub
from .factory import create_quoter, create_ticker_engine
from .interface import EventSink, ExternalQuoter, TickPolicy
from .models import Quote
from .simulator import SeedQuoter, SimulatedTickPolicy
from .stream import create_stream_router
from .subscription import Subscription

__all__ = [
    "ERROR",
    "EngineClosed",
    "TICK",
    "EventHub",
    "EventSink",
    "ExternalQuoter",
    "InvalidQuote",
    "InvalidSubscriptionSeed",
    "InvalidSymbol",
    "MissingQuoter",
    "Quote",
    "QuoteSourceUnavailable",
    "SeedQuoter",
    "SimulatedTickPolicy",
    "Subscription",
    "SymbolNotFound",
    "TickPolicy",
    "TickerEngine",
    "TickerError",
    "create_quoter",
    "create_stream_router",
    "create_ticker_engine",
]
