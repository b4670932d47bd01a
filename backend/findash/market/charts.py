"""Chart fetch router: historical OHLCV series per market."""

from __future__ import annotations

import logging

from .cache import TTLCache
from .demo import DemoDataGenerator
from .models import ChartInterval, ChartPoint, MarketType
from .providers import AlphaVantageClient, ProxyClient
from .rate_limiter import RateLimiter
from .request_queue import RequestQueue

logger = logging.getLogger(__name__)

CHART_TTL = 1800.0
# Live US series refresh faster to surface intraday-ish moves
US_CHART_TTL = 300.0

# Yahoo (interval, range) per chart interval for Indian equities; bars stay
# daily, only the range widens
INDIA_RANGES: dict[ChartInterval, tuple[str, str]] = {
    ChartInterval.DAILY: ("1d", "1y"),
    ChartInterval.WEEKLY: ("1d", "5y"),
    ChartInterval.MONTHLY: ("1d", "max"),
}


def chart_cache_key(symbol: str, interval: ChartInterval, market_type: MarketType) -> str:
    return f"chart:{symbol}:{interval.value}:{market_type.value}"


class ChartRouter:
    """Historical series by market. Never raises for provider failures.

    crypto and india-mf have no historical provider and always get a
    generated series; every other market falls back to one on error.
    """

    def __init__(
        self,
        cache: TTLCache,
        queue: RequestQueue,
        rate_limiter: RateLimiter,
        demo: DemoDataGenerator,
        alpha_vantage: AlphaVantageClient,
        proxy: ProxyClient,
    ) -> None:
        self._cache = cache
        self._queue = queue
        self._limiter = rate_limiter
        self._demo = demo
        self._alpha_vantage = alpha_vantage
        self._proxy = proxy

    async def fetch_chart_data(
        self,
        symbol: str,
        interval: ChartInterval | str = ChartInterval.DAILY,
        market_type: MarketType | str = MarketType.US,
    ) -> list[ChartPoint]:
        interval = ChartInterval(interval)
        market_type = MarketType(market_type)
        key = chart_cache_key(symbol, interval, market_type)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Using cached chart for %s (%s)", symbol, interval.value)
            return cached

        if market_type in (MarketType.CRYPTO, MarketType.INDIA_MF):
            points = self._demo.generate_chart(symbol)
            self._cache.set(key, points, CHART_TTL)
            return points

        ttl = US_CHART_TTL if market_type is MarketType.US else CHART_TTL
        try:
            if market_type is MarketType.INDIA:
                yahoo_interval, yahoo_range = INDIA_RANGES[interval]
                points = await self._proxy.indian_stock_chart(symbol, yahoo_interval, yahoo_range)
            else:
                points = await self._fetch_time_series(symbol, interval)
        except Exception as exc:
            logger.warning("Chart fetch failed for %s (%s), using demo data: %s", symbol, market_type.value, exc)
            points = self._demo.generate_chart(symbol)
        else:
            logger.info("Loaded %d live bars for %s (%s)", len(points), symbol, interval.value)

        self._cache.set(key, points, ttl)
        return points

    async def _fetch_time_series(self, symbol: str, interval: ChartInterval) -> list[ChartPoint]:
        async def call() -> list[ChartPoint]:
            self._limiter.check_and_consume()
            return await self._alpha_vantage.time_series(symbol, interval)

        return await self._queue.add(call)
