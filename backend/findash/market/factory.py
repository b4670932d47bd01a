"""Factory wiring the market data core together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import httpx

from .cache import TTLCache
from .charts import ChartRouter
from .config import MarketDataConfig
from .demo import DemoDataGenerator
from .feed import QuoteFeed
from .models import ChartInterval, ChartPoint, MarketType, Quote, QuoteUpdate
from .providers import AlphaVantageClient, BinanceClient, ProxyClient
from .quotes import QuoteRouter
from .rate_limiter import RateLimiter
from .realtime import Connector, SubscriptionManager, default_connector
from .request_queue import RequestQueue
from .search import SymbolSearch

logger = logging.getLogger(__name__)


@dataclass
class MarketData:
    """The core's public surface, as consumed by dashboard widgets.

    Holds one instance of every shared component; pass it around instead of
    reaching for module globals.
    """

    config: MarketDataConfig
    http_client: httpx.AsyncClient
    cache: TTLCache
    queue: RequestQueue
    rate_limiter: RateLimiter
    demo: DemoDataGenerator
    quotes: QuoteRouter
    charts: ChartRouter
    search: SymbolSearch
    realtime: SubscriptionManager
    feed: QuoteFeed

    async def fetch_quote(self, symbol: str, market_type: MarketType | str = MarketType.US) -> Quote:
        return await self.quotes.fetch_quote(symbol, market_type)

    async def fetch_multiple_quotes(self, symbols: list[str], market_type: MarketType | str = MarketType.US) -> list[Quote]:
        return await self.quotes.fetch_multiple_quotes(symbols, market_type)

    async def fetch_chart_data(
        self,
        symbol: str,
        interval: ChartInterval | str = ChartInterval.DAILY,
        market_type: MarketType | str = MarketType.US,
    ) -> list[ChartPoint]:
        return await self.charts.fetch_chart_data(symbol, interval, market_type)

    def subscribe(
        self,
        symbol: str,
        market_type: MarketType | str,
        on_update: Callable[[QuoteUpdate], None],
    ) -> Callable[[], None]:
        return self.realtime.subscribe(symbol, market_type, on_update)

    def is_connected(self, market_type: MarketType | str) -> bool:
        return self.realtime.is_connected(market_type)

    async def aclose(self) -> None:
        """Stop the feed, close sockets and the HTTP client."""
        await self.feed.stop()
        await self.realtime.close()
        await self.http_client.aclose()


def create_market_data(
    config: MarketDataConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
    connector: Connector = default_connector,
) -> MarketData:
    """Build the market data core.

    - config omitted -> MarketDataConfig.from_env()
    - ALPHA_VANTAGE key "demo" -> live US calls will mostly fall back to demo data
    - FINNHUB key missing/short -> US push disabled, feed polls instead

    Nothing is started; call `await market_data.feed.start(...)` to begin
    watching symbols.
    """
    config = config or MarketDataConfig.from_env()
    http_client = http_client or httpx.AsyncClient(timeout=config.http_timeout)

    cache = TTLCache()
    queue = RequestQueue(min_delay=config.request_min_delay)
    limiter = RateLimiter(max_requests=config.rate_limit_max, window=config.rate_limit_window)
    demo = DemoDataGenerator()
    alpha_vantage = AlphaVantageClient(http_client, config.alpha_vantage_key, config.alpha_vantage_url)
    binance = BinanceClient(http_client, config.binance_url)
    proxy = ProxyClient(http_client, config.proxy_base_url)

    if alpha_vantage.is_demo_key:
        logger.info("Alpha Vantage: demo key, US data will mostly come from demo fallback")
    else:
        logger.info("Alpha Vantage: live key configured")

    quotes = QuoteRouter(cache, queue, limiter, demo, alpha_vantage, binance, proxy)
    realtime = SubscriptionManager(
        config.finnhub_key,
        connector=connector,
        reconnect_base_delay=config.reconnect_base_delay,
        max_reconnect_attempts=config.max_reconnect_attempts,
        min_key_length=config.finnhub_min_key_length,
    )
    return MarketData(
        config=config,
        http_client=http_client,
        cache=cache,
        queue=queue,
        rate_limiter=limiter,
        demo=demo,
        quotes=quotes,
        charts=ChartRouter(cache, queue, limiter, demo, alpha_vantage, proxy),
        search=SymbolSearch(demo, alpha_vantage, proxy, limiter),
        realtime=realtime,
        feed=QuoteFeed(quotes, realtime, poll_interval=config.poll_interval),
    )
