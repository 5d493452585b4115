"""Massive (Polygon.io) API client for real initial quotes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .errors import SymbolNotFound
from .interface import ExternalQuoter
from .models import Quote
from .subscription import canonical_symbol

logger = logging.getLogger(__name__)


class MassiveQuoter(ExternalQuoter):
    """ExternalQuoter backed by the Massive (Polygon.io) REST API.

    Calls GET /v2/snapshot/locale/us/markets/stocks/tickers/{ticker} and maps
    the snapshot's last NBBO quote and last trade onto a Quote. Only the first
    quote of a subscription comes from here; ticks after that are simulated.
    """

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key
        self._client: Any = None  # Lazy import to avoid hard dependency

    async def get_quote(self, symbol: str) -> Quote:
        ticker = canonical_symbol(symbol)
        # The Massive RESTClient is synchronous; run it in a thread to
        # avoid blocking the event loop.
        try:
            snapshot = await asyncio.to_thread(self._fetch_snapshot, ticker)
        except Exception as e:
            if _is_not_found(e):
                logger.info("Massive does not know %s", ticker)
                raise SymbolNotFound(symbol) from e
            raise
        try:
            last_quote = snapshot.last_quote
            quote = Quote(
                symbol=ticker,
                bid=float(last_quote.bid_price),
                bid_size=int(last_quote.bid_size),
                ask=float(last_quote.ask_price),
                ask_size=int(last_quote.ask_size),
                last=float(snapshot.last_trade.price),
            )
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("No usable snapshot for %s: %s", ticker, e)
            raise SymbolNotFound(symbol) from e
        logger.debug("Massive quote for %s: %.2f x %.2f", ticker, quote.bid, quote.ask)
        return quote

    def _fetch_snapshot(self, ticker: str) -> Any:
        """Synchronous call to the Massive REST API. Runs in a thread."""
        # Lazy import: only import massive when actually using real market data.
        from massive import RESTClient
        from massive.rest.models import SnapshotMarketType

        if self._client is None:
            self._client = RESTClient(api_key=self._api_key)
        return self._client.get_snapshot_ticker(SnapshotMarketType.STOCKS, ticker)


def _is_not_found(error: Exception) -> bool:
    """Whether a REST client error is the API's answer for an unknown ticker.

    The client raises on any non-200 response with the response body as the
    message, e.g. ``{"status":"NOT_FOUND","message":"Ticker not found."}``.
    """
    status = getattr(error, "status", None)
    if status is None:
        status = getattr(getattr(error, "response", None), "status", None)
    if status == 404:
        return True
    return "NOT_FOUND" in str(error)
