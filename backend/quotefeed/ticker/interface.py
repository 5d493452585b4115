"""Abstract interfaces the ticker engine is built against."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import Quote


class ExternalQuoter(ABC):
    """Source of the initial quote for a newly subscribed symbol.

    The engine asks the quoter exactly once per subscription, when the first
    subscriber arrives. Every later update comes from the TickPolicy.

    Implementations raise SymbolNotFound for symbols they do not know. Any
    other exception is reported to the subscriber as QuoteSourceUnavailable.
    """

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for ``symbol``."""


class EventSink(ABC):
    """Fire-and-forget broadcast of engine events.

    The engine emits ``"tick"`` with the new Quote and ``"error"`` with the
    exception raised while updating a subscription.
    """

    @abstractmethod
    def emit(self, event_name: str, payload: Any) -> None:
        """Broadcast ``payload`` under ``event_name``. Never acknowledges."""


class TickPolicy(ABC):
    """Produces the next quote of a subscription on every scheduler tick."""

    @abstractmethod
    async def next_quote(self, quote: Quote | None) -> Quote:
        """Return a new Quote derived from ``quote``.

        Raises InvalidQuote if ``quote`` is None or marked invalid.
        """
