"""Subscription and ticking engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .errors import (
    EngineClosed,
    InvalidSubscriptionSeed,
    InvalidSymbol,
    MissingQuoter,
    QuoteSourceUnavailable,
    SymbolNotFound,
)
from .events import ERROR, TICK, EventHub
from .interface import EventSink, ExternalQuoter, TickPolicy
from .models import Quote
from .simulator import SimulatedTickPolicy
from .subscription import Subscription, SubscriptionSet, canonical_symbol

logger = logging.getLogger(__name__)

# Don't let callers hammer the feed. One update per second is enough.
MAX_UPDATE_FREQUENCY_MS = 1000


class TickerEngine:
    """Reference-counted quote subscriptions refreshed on a recurring timer.

    The first subscriber to a symbol triggers one fetch from the external
    quoter. The timer starts with the first subscription and stops when the
    last one is removed. Every tick asks the tick policy for a new quote per
    subscribed symbol, stores it and emits ``"tick"`` on the event sink, or
    emits ``"error"`` if the update failed.

    Lifecycle (inside a running event loop):
        engine = TickerEngine(SeedQuoter())
        engine.events.on("tick", print)
        quote = await engine.subscribe("aapl")
        # ... ticks arrive ...
        await engine.unsubscribe("AAPL")
        await engine.aclose()

    Updates issued by a tick are not awaited by the timer. Overlapping
    updates for one symbol may finish out of order; the subscription keeps
    whichever finished last and events go out in completion order. Stopping
    the timer does not cancel updates already issued.
    """

    def __init__(
        self,
        external_quoter: ExternalQuoter | None,
        update_frequency_ms: float = MAX_UPDATE_FREQUENCY_MS,
        event_sink: EventSink | None = None,
        tick_policy: TickPolicy | None = None,
    ) -> None:
        if external_quoter is None:
            raise MissingQuoter("An external quoter is required.")

        self._quoter = external_quoter
        self._interval_ms = min(update_frequency_ms, MAX_UPDATE_FREQUENCY_MS)
        if self._interval_ms <= 0:
            logger.warning(
                "Update frequency %s ms is not positive; the ticker will spin", self._interval_ms
            )
        self._events: EventSink = event_sink if event_sink is not None else EventHub()
        self._policy: TickPolicy = tick_policy if tick_policy is not None else SimulatedTickPolicy()

        self._subscriptions = SubscriptionSet()
        self._pending: dict[str, asyncio.Task[Quote]] = {}  # In-flight initial fetches
        self._updates: set[asyncio.Task[None]] = set()  # In-flight tick updates
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._closed = False

    # --- Subscriptions ---

    async def subscribe(self, symbol: str) -> Quote:
        """Add a subscriber to the feed for ``symbol``. Returns a Quote.

        An existing subscription returns its current in-memory quote; the
        quoter is not asked again. A new one returns the freshly fetched
        quote and starts the ticker.

        Raises SymbolNotFound or QuoteSourceUnavailable (both InvalidSymbol),
        or EngineClosed once aclose() has been called.
        """
        if not isinstance(symbol, str) or not symbol.strip():
            raise SymbolNotFound(repr(symbol))
        key = canonical_symbol(symbol)

        while True:
            if self._closed:
                raise EngineClosed("Ticker engine is closed")
            subscription = self._subscriptions.acquire(key)
            if subscription is not None:
                return subscription.current_quote

            fetch = self._pending.get(key)
            if fetch is None:
                fetch = asyncio.create_task(self._open(key, symbol), name=f"subscribe-{key}")
                self._pending[key] = fetch
                return await fetch

            # Someone else is already fetching this symbol. Wait for it, then
            # count ourselves on the subscription it created.
            try:
                await asyncio.shield(fetch)
            except asyncio.CancelledError:
                if not fetch.cancelled():
                    raise
                # The subscriber that started the fetch went away; start over.

    async def unsubscribe(self, symbol: str) -> None:
        """Remove a subscriber. Unknown symbols are ignored.

        The last subscriber out removes the subscription, and the last
        subscription out stops the ticker.
        """
        if not isinstance(symbol, str):
            return
        subscription, removed = self._subscriptions.release(symbol)
        if subscription is None:
            logger.debug("Unsubscribe for inactive symbol %s ignored", symbol)
            return
        if removed:
            logger.info("Removed subscription for %s", subscription.symbol)
            # No await between removal and this check: a concurrent subscribe
            # cannot slip in and be left without a running ticker.
            if len(self._subscriptions) == 0:
                self.stop_ticker()

    async def find_subscription(self, symbol: str) -> Subscription | None:
        """The active subscription for ``symbol`` in any case, or None."""
        if not isinstance(symbol, str):
            return None
        return self._subscriptions.get(symbol)

    async def _open(self, key: str, symbol: str) -> Quote:
        """Fetch the initial quote and register a new subscription."""
        try:
            try:
                quote = await self._quoter.get_quote(symbol)
            except InvalidSymbol:
                raise
            except Exception as e:
                logger.warning("Quoter failed for %s: %s", key, e)
                raise QuoteSourceUnavailable(symbol) from e

            if self._closed:
                raise EngineClosed(f"Ticker engine closed while subscribing to {key}")

            try:
                subscription = self._subscriptions.add(Subscription(quote))
            except InvalidSubscriptionSeed as e:
                raise SymbolNotFound(symbol) from e

            logger.info("Subscribed to %s at %.2f x %.2f", subscription.symbol, quote.bid, quote.ask)
            self.start_ticker()
            return quote
        finally:
            self._pending.pop(key, None)

    # --- Scheduler ---

    def start_ticker(self) -> None:
        """Start the recurring tick timer. No-op if already running.

        Must be called from inside a running event loop.
        """
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name="ticker-loop")
        logger.info("Ticker started: %s ms interval", self._interval_ms)

    def stop_ticker(self) -> None:
        """Cancel the tick timer. Safe to call multiple times."""
        was_running = self._running
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None
        if was_running:
            logger.info("Ticker stopped")

    def tick(self) -> int:
        """Issue one round of updates. Returns how many were issued.

        Iterates a snapshot of the active subscriptions. Subscriptions with
        no subscribers are skipped, and the rest of the round is dropped as
        soon as the ticker is stopped.
        """
        issued = 0
        for subscription in self._subscriptions.snapshot():
            if not self._running:
                logger.debug("Ticker stopped mid-tick; skipping remaining subscriptions")
                break
            if not subscription.has_subscribers():
                logger.debug("No subscribers for %s", subscription.symbol)
                continue
            task = asyncio.create_task(
                self._update(subscription), name=f"update-{subscription.symbol}"
            )
            self._updates.add(task)
            task.add_done_callback(self._updates.discard)
            issued += 1
        logger.debug("Tick issued %d updates", issued)
        return issued

    async def _run_loop(self) -> None:
        """Core loop: sleep one interval, tick, repeat."""
        interval = max(self._interval_ms, 0) / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Tick failed")

    async def _update(self, subscription: Subscription) -> None:
        try:
            quote = await self._policy.next_quote(subscription.current_quote)
        except Exception as e:
            logger.warning("Update for %s failed: %s", subscription.symbol, e)
            self._emit(ERROR, e)
            return
        subscription.current_quote = quote
        self._emit(TICK, quote)

    def _emit(self, event_name: str, payload: Any) -> None:
        try:
            self._events.emit(event_name, payload)
        except Exception:
            logger.exception("Event sink failed on %r", event_name)

    async def aclose(self) -> None:
        """Stop the ticker and wait for fetches and updates already in flight.

        Fetches that finish after this point register nothing and fail their
        subscribers with EngineClosed. Safe to call multiple times.
        """
        self._closed = True
        if self._pending:
            await asyncio.gather(*self._pending.values(), return_exceptions=True)
        task = self._task
        self.stop_ticker()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._updates:
            await asyncio.gather(*self._updates, return_exceptions=True)

    # --- Introspection ---

    @property
    def events(self) -> EventSink:
        """The sink ticks and errors are emitted on."""
        return self._events

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def update_frequency_ms(self) -> float:
        return self._interval_ms

    @property
    def subscriptions(self) -> list[Subscription]:
        """Snapshot of the active subscriptions."""
        return self._subscriptions.snapshot()

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, symbol: str) -> bool:
        return isinstance(symbol, str) and symbol in self._subscriptions
