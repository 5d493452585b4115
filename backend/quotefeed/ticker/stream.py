"""SSE streaming endpoint for live quote updates."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .engine import TickerEngine
from .errors import InvalidSymbol, SymbolNotFound
from .events import TICK, EventHub
from .models import Quote
from .subscription import canonical_symbol

logger = logging.getLogger(__name__)


def create_stream_router(engine: TickerEngine) -> APIRouter:
    """Create the SSE streaming router bound to a ticker engine.

    The engine must publish on an EventHub so each stream can listen for
    its own symbol's ticks.
    """
    hub = engine.events
    if not isinstance(hub, EventHub):
        raise TypeError("Streaming requires an engine that publishes on an EventHub")

    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/quotes/{symbol}")
    async def stream_quotes(symbol: str, request: Request) -> StreamingResponse:
        """SSE endpoint for one symbol's live quotes.

        Subscribing happens once the response body starts streaming, and the
        stream unsubscribes when it ends. The first event is the current
        quote, then one event per tick:

            data: {"symbol": "AAPL", "bid": 190.12, "ask": 190.19, ...}

        A symbol that cannot be subscribed gets a single error event and the
        stream closes:

            event: error
            data: {"symbol": "ZZZZ", "reason": "not_found", "detail": "..."}
        """
        return StreamingResponse(
            _generate_events(engine, hub, symbol, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


def _format_event(quote: Quote) -> str:
    return f"data: {json.dumps(quote.to_dict())}\n\n"


def _format_error(symbol: str, error: InvalidSymbol) -> str:
    reason = "not_found" if isinstance(error, SymbolNotFound) else "unavailable"
    payload = {"symbol": symbol, "reason": reason, "detail": str(error)}
    return f"event: error\ndata: {json.dumps(payload)}\n\n"


async def _generate_events(
    engine: TickerEngine,
    hub: EventHub,
    symbol: str,
    request: Request,
    poll_interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted quote events.

    Subscribes to ``symbol``, yields the initial quote, then every tick for
    it. Checks for a disconnect at least every ``poll_interval`` seconds. The
    subscription is only taken once the body is being read, and released in
    the same ``try``/``finally`` that streams it.
    """
    client_ip = request.client.host if request.client else "unknown"
    try:
        quote = await engine.subscribe(symbol)
    except InvalidSymbol as e:
        logger.info("SSE client %s could not subscribe to %s: %s", client_ip, symbol, e)
        yield _format_error(symbol, e)
        return

    key = canonical_symbol(quote.symbol)
    queue: asyncio.Queue[Quote] = asyncio.Queue()

    def on_tick(update: Quote) -> None:
        if canonical_symbol(update.symbol) == key:
            queue.put_nowait(update)

    hub.on(TICK, on_tick)
    logger.info("SSE client %s streaming %s", client_ip, key)

    try:
        # Tell the client to retry after 1 second if the connection drops
        yield "retry: 1000\n\n"
        yield _format_event(quote)

        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break
            try:
                update = await asyncio.wait_for(queue.get(), timeout=poll_interval)
            except asyncio.TimeoutError:
                continue
            yield _format_event(update)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
    finally:
        hub.off(TICK, on_tick)
        await engine.unsubscribe(key)
