"""Quote fetch router: cache, queue, rate limit and demo fallback policy."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from .cache import TTLCache
from .demo import DemoDataGenerator
from .errors import QuoteUnavailable
from .models import MarketType, Quote
from .providers import AlphaVantageClient, BinanceClient, ProxyClient
from .rate_limiter import RateLimiter
from .request_queue import RequestQueue
from .seed_quotes import DEFAULT_GAINERS

logger = logging.getLogger(__name__)

# Seconds a live quote stays fresh, tuned to how fast each market moves
QUOTE_TTL: dict[MarketType, float] = {
    MarketType.US: 30.0,
    MarketType.INDIA: 120.0,
    MarketType.CRYPTO: 60.0,
    MarketType.US_MF: 300.0,
    MarketType.INDIA_MF: 300.0,
}
# Shorter so a recovered provider is retried sooner
DEMO_QUOTE_TTL = 60.0
GAINERS_TTL = 60.0


def quote_cache_key(symbol: str, market_type: MarketType) -> str:
    return f"quote:{market_type.value}:{symbol}"


def gainers_cache_key(symbols: Iterable[str]) -> str:
    return "market-gainers:" + ",".join(sorted(symbols))


class QuoteRouter:
    """Dispatches (symbol, market_type) to the right provider adapter.

    Routing:
        us        Alpha Vantage, through RateLimiter + RequestQueue
        india     proxy (Yahoo Finance), through RequestQueue
        crypto    Binance, direct
        us-mf     proxy (Alpha Vantage), through RequestQueue
        india-mf  proxy (MFAPI), through RequestQueue

    Any adapter failure falls back to the static demo quote for the symbol;
    QuoteUnavailable is raised only when no demo quote exists either.
    """

    def __init__(
        self,
        cache: TTLCache,
        queue: RequestQueue,
        rate_limiter: RateLimiter,
        demo: DemoDataGenerator,
        alpha_vantage: AlphaVantageClient,
        binance: BinanceClient,
        proxy: ProxyClient,
    ) -> None:
        self._cache = cache
        self._queue = queue
        self._limiter = rate_limiter
        self._demo = demo
        self._alpha_vantage = alpha_vantage
        self._binance = binance
        self._proxy = proxy
        self._adapters: dict[MarketType, Callable[[str], Awaitable[Quote]]] = {
            MarketType.US: self._fetch_us,
            MarketType.INDIA: self._fetch_india,
            MarketType.CRYPTO: self._binance.ticker_quote,
            MarketType.US_MF: self._fetch_us_mutual_fund,
            MarketType.INDIA_MF: self._fetch_india_mutual_fund,
        }

    async def fetch_quote(
        self,
        symbol: str,
        market_type: MarketType | str = MarketType.US,
        bypass_cache: bool = False,
    ) -> Quote:
        """Return a live, cached, or demo quote. Raises QuoteUnavailable."""
        market_type = MarketType(market_type)
        key = quote_cache_key(symbol, market_type)
        if not bypass_cache:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        try:
            quote = await self._adapters[market_type](symbol)
        except Exception as exc:
            demo = self._demo.quote(symbol, market_type)
            if demo is None:
                logger.error("No live or demo quote for %s (%s): %s", symbol, market_type.value, exc)
                raise QuoteUnavailable(symbol, market_type.value, str(exc)) from exc
            logger.warning("Using demo data for %s (%s): %s", symbol, market_type.value, exc)
            self._cache.set(key, demo, DEMO_QUOTE_TTL)
            return demo

        self._cache.set(key, quote, QUOTE_TTL[market_type])
        return quote

    async def fetch_multiple_quotes(
        self,
        symbols: Iterable[str],
        market_type: MarketType | str = MarketType.US,
    ) -> list[Quote]:
        """Fetch every symbol concurrently; unresolved symbols are dropped.

        Results come back in order of resolution, not input order.
        """
        market_type = MarketType(market_type)
        results: list[Quote] = []

        async def one(symbol: str) -> None:
            try:
                results.append(await self.fetch_quote(symbol, market_type))
            except QuoteUnavailable as exc:
                logger.error("Dropping %s from batch: %s", symbol, exc)

        await asyncio.gather(*(one(symbol) for symbol in symbols))
        return results

    async def fetch_market_gainers(self, symbols: Iterable[str] | None = None) -> list[Quote]:
        """US quotes for the gainers set, best change_percent first."""
        symbols = list(symbols or DEFAULT_GAINERS)
        key = gainers_cache_key(symbols)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        quotes = await self.fetch_multiple_quotes(symbols, MarketType.US)
        gainers = sorted(quotes, key=lambda q: q.change_percent, reverse=True)
        self._cache.set(key, gainers, GAINERS_TTL)
        return gainers

    # --- Adapters ---

    async def _fetch_us(self, symbol: str) -> Quote:
        async def call() -> Quote:
            self._limiter.check_and_consume()
            return await self._alpha_vantage.global_quote(symbol, MarketType.US)

        return await self._queue.add(call)

    async def _fetch_india(self, symbol: str) -> Quote:
        return await self._queue.add(lambda: self._proxy.indian_stock_quote(symbol))

    async def _fetch_us_mutual_fund(self, symbol: str) -> Quote:
        return await self._queue.add(lambda: self._proxy.us_mutual_fund_quote(symbol))

    async def _fetch_india_mutual_fund(self, symbol: str) -> Quote:
        return await self._queue.add(lambda: self._proxy.indian_mutual_fund_quote(symbol))
