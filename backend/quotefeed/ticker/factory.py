"""Factories wiring the ticker engine from environment variables."""

from __future__ import annotations

import logging
import os

from .engine import MAX_UPDATE_FREQUENCY_MS, TickerEngine
from .interface import EventSink, ExternalQuoter, TickPolicy

logger = logging.getLogger(__name__)


def create_quoter() -> ExternalQuoter:
    """Create the appropriate external quoter based on environment variables.

    - MASSIVE_API_KEY set and non-empty → MassiveQuoter (real initial quotes)
    - Otherwise → SeedQuoter (fixed seed quotes for the default watchlist)
    """
    api_key = os.environ.get("MASSIVE_API_KEY", "").strip()

    if api_key:
        from .massive_client import MassiveQuoter

        logger.info("Quote source: Massive API (real data)")
        return MassiveQuoter(api_key=api_key)
    else:
        from .simulator import SeedQuoter

        logger.info("Quote source: seed quotes")
        return SeedQuoter()


def update_frequency_from_env() -> float:
    """Ticker interval from TICKER_UPDATE_MS, or the default if unset or unparsable."""
    raw = os.environ.get("TICKER_UPDATE_MS", "").strip()
    if not raw:
        return MAX_UPDATE_FREQUENCY_MS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid TICKER_UPDATE_MS=%r", raw)
        return MAX_UPDATE_FREQUENCY_MS


def create_ticker_engine(
    event_sink: EventSink | None = None,
    tick_policy: TickPolicy | None = None,
) -> TickerEngine:
    """Create a TickerEngine with the quoter and interval chosen by the environment.

    Returns an idle engine. The ticker starts with the first subscription.
    """
    return TickerEngine(
        create_quoter(),
        update_frequency_ms=update_frequency_from_env(),
        event_sink=event_sink,
        tick_policy=tick_policy,
    )
