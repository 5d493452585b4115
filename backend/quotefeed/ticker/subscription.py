"""Per-symbol subscription record and the active subscription set."""

from __future__ import annotations

from threading import Lock

from .errors import InvalidSubscriptionSeed
from .models import Quote


def canonical_symbol(symbol: str) -> str:
    """Symbols are case-insensitive; the uppercase form is the key."""
    return symbol.strip().upper()


class Subscription:
    """Pairs a symbol's current quote with the number of subscribers to it.

    The subscriber count starts at 1 (the subscriber whose request created
    it) and is only changed through add_subscriber/remove_subscriber. The
    scheduler replaces ``current_quote`` but never touches the count.
    """

    __slots__ = ("symbol", "current_quote", "_subscribers")

    def __init__(self, current_quote: Quote | None) -> None:
        if current_quote is None or not current_quote.is_valid:
            raise InvalidSubscriptionSeed("Argument 'current_quote' is None or invalid.")
        self.symbol = canonical_symbol(current_quote.symbol)
        self.current_quote = current_quote
        self._subscribers = 1

    def matches(self, symbol: str | None) -> bool:
        return isinstance(symbol, str) and canonical_symbol(symbol) == self.symbol

    def add_subscriber(self) -> int:
        self._subscribers += 1
        return self._subscribers

    def remove_subscriber(self) -> int:
        self._subscribers -= 1
        return self._subscribers

    def has_subscribers(self) -> bool:
        return self._subscribers > 0

    @property
    def subscriber_count(self) -> int:
        return self._subscribers

    def __repr__(self) -> str:
        return f"Subscription({self.symbol!r}, subscribers={self._subscribers})"


class SubscriptionSet:
    """Thread-safe, insertion-ordered set of active subscriptions.

    Holds at most one Subscription per canonical symbol. Insert, release and
    snapshot are mutually exclusive so a tick never iterates a half-updated
    collection.
    """

    def __init__(self) -> None:
        self._subs: dict[str, Subscription] = {}
        self._lock = Lock()

    def get(self, symbol: str) -> Subscription | None:
        """Lookup by symbol in any case, or None if not active."""
        with self._lock:
            return self._subs.get(canonical_symbol(symbol))

    def add(self, subscription: Subscription) -> Subscription:
        """Insert a subscription unless one already exists for its symbol.

        Returns whichever subscription is active for the symbol afterwards.
        When an entry already existed, the caller's subscriber is counted on it.
        """
        with self._lock:
            existing = self._subs.get(subscription.symbol)
            if existing is not None:
                existing.add_subscriber()
                return existing
            self._subs[subscription.symbol] = subscription
            return subscription

    def acquire(self, symbol: str) -> Subscription | None:
        """Count one more subscriber on an active subscription, if any."""
        with self._lock:
            sub = self._subs.get(canonical_symbol(symbol))
            if sub is not None:
                sub.add_subscriber()
            return sub

    def release(self, symbol: str) -> tuple[Subscription | None, bool]:
        """Drop one subscriber from a symbol's subscription.

        Removes the subscription once nobody is subscribed. Returns the
        subscription (or None when the symbol was not active) and whether
        the subscription was removed.
        """
        with self._lock:
            key = canonical_symbol(symbol)
            sub = self._subs.get(key)
            if sub is None:
                return None, False
            sub.remove_subscriber()
            if sub.has_subscribers():
                return sub, False
            del self._subs[key]
            return sub, True

    def snapshot(self) -> list[Subscription]:
        """Stable copy of the active subscriptions, in insertion order."""
        with self._lock:
            return list(self._subs.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._subs)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return canonical_symbol(symbol) in self._subs
