"""Data models for quotes."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Quote:
    """Immutable bid/ask/last snapshot of a single symbol at a point in time."""

    symbol: str
    bid: float
    bid_size: int
    ask: float
    ask_size: int
    last: float
    is_valid: bool = True
    timestamp: float = field(default_factory=time.time)  # Unix seconds

    @property
    def spread(self) -> float:
        """Ask minus bid."""
        return round(self.ask - self.bid, 4)

    @property
    def mid(self) -> float:
        return round((self.bid + self.ask) / 2, 4)

    def to_dict(self) -> dict:
        """Serialize for JSON / SSE transmission."""
        return {
            "symbol": self.symbol,
            "bid": self.bid,
            "bid_size": self.bid_size,
            "ask": self.ask,
            "ask_size": self.ask_size,
            "last": self.last,
            "spread": self.spread,
            "timestamp": self.timestamp,
        }
