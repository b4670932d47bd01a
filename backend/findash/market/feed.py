"""Live quote feed: push updates when a stream is up, polling otherwise."""

from __future__ import annotations

import asyncio
import logging
from threading import Lock
from typing import Callable

from .errors import QuoteUnavailable
from .models import MarketType, Quote, QuoteUpdate
from .quotes import QuoteRouter
from .realtime import SubscriptionManager

logger = logging.getLogger(__name__)

FeedKey = tuple[MarketType, str]


class QuoteFeed:
    """Keeps the latest Quote for every watched (market_type, symbol).

    Each symbol is seeded through QuoteRouter.fetch_quote and registered with
    the SubscriptionManager. Push updates are merged into the last known
    quote so partial equity trades never wipe out name or change fields.
    Every poll_interval seconds, symbols whose market has no open stream are
    re-fetched; when a stream comes back, polling for it stops on its own.

    Lifecycle:
        feed = QuoteFeed(router, manager)
        await feed.start([("AAPL", "us"), ("BTC", "crypto")])
        await feed.add_symbol("TSLA", "us")
        await feed.remove_symbol("AAPL", "us")
        await feed.stop()
    """

    def __init__(
        self,
        router: QuoteRouter,
        manager: SubscriptionManager,
        poll_interval: float = 30.0,
    ) -> None:
        self._router = router
        self._manager = manager
        self._interval = poll_interval
        self._quotes: dict[FeedKey, Quote] = {}
        self._unsubscribers: dict[FeedKey, Callable[[], None]] = {}
        self._lock = Lock()
        self._version = 0
        self._task: asyncio.Task | None = None

    async def start(self, symbols: list[tuple[str, MarketType | str]]) -> None:
        for symbol, market_type in symbols:
            await self.add_symbol(symbol, market_type)
        self._task = asyncio.create_task(self._poll_loop(), name="quote-feed-poller")
        logger.info("Quote feed started: %d symbols, %.1fs poll interval", len(symbols), self._interval)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        for unsubscribe in self._unsubscribers.values():
            unsubscribe()
        self._unsubscribers.clear()
        logger.info("Quote feed stopped")

    async def add_symbol(self, symbol: str, market_type: MarketType | str) -> None:
        key = (MarketType(market_type), symbol.upper().strip())
        if key in self._unsubscribers:
            return
        self._unsubscribers[key] = self._manager.subscribe(key[1], key[0], self._on_push)
        await self._refresh(key)
        logger.info("Quote feed: watching %s (%s)", key[1], key[0].value)

    async def remove_symbol(self, symbol: str, market_type: MarketType | str) -> None:
        key = (MarketType(market_type), symbol.upper().strip())
        unsubscribe = self._unsubscribers.pop(key, None)
        if unsubscribe is not None:
            unsubscribe()
        with self._lock:
            if self._quotes.pop(key, None) is not None:
                self._version += 1

    def get(self, symbol: str, market_type: MarketType | str) -> Quote | None:
        with self._lock:
            return self._quotes.get((MarketType(market_type), symbol))

    def get_all(self) -> dict[FeedKey, Quote]:
        """Snapshot of every known quote. Returns a shallow copy."""
        with self._lock:
            return dict(self._quotes)

    def get_symbols(self) -> list[FeedKey]:
        return list(self._unsubscribers)

    @property
    def version(self) -> int:
        """Bumped on every change; lets the SSE stream skip idle ticks."""
        return self._version

    # --- Internal ---

    def _on_push(self, update: QuoteUpdate) -> None:
        key = (update.market_type, update.symbol)
        if key not in self._unsubscribers:
            return
        with self._lock:
            known = self._quotes.get(key)
            self._quotes[key] = known.merge(update) if known else update.to_quote()
            self._version += 1

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self._poll_once()

    async def _poll_once(self) -> None:
        """Re-fetch the symbols whose market is not streaming right now."""
        stale = [key for key in self._unsubscribers if not self._manager.is_connected(key[0])]
        if not stale:
            return
        await asyncio.gather(*(self._refresh(key) for key in stale))
        logger.debug("Quote feed poll: refreshed %d/%d symbols", len(stale), len(self._unsubscribers))

    async def _refresh(self, key: FeedKey) -> None:
        market_type, symbol = key
        try:
            quote = await self._router.fetch_quote(symbol, market_type)
        except QuoteUnavailable as exc:
            logger.warning("Quote feed: %s", exc)
            return
        if key not in self._unsubscribers:
            # Removed while the fetch was in flight; discard
            return
        with self._lock:
            self._quotes[key] = quote
            self._version += 1
