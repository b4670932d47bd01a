"""Symbol search across markets."""

from __future__ import annotations

import logging

from .demo import DemoDataGenerator
from .models import MarketType, SearchResult
from .providers import AlphaVantageClient, ProxyClient
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 10


class SymbolSearch:
    """Find symbols by ticker or name. Never raises; worst case is [].

    Demo-table matches answer first for us/crypto so the quota-constrained
    provider is only asked about symbols we know nothing about.
    """

    def __init__(
        self,
        demo: DemoDataGenerator,
        alpha_vantage: AlphaVantageClient,
        proxy: ProxyClient,
        rate_limiter: RateLimiter,
    ) -> None:
        self._demo = demo
        self._alpha_vantage = alpha_vantage
        self._proxy = proxy
        self._limiter = rate_limiter

    async def search(self, query: str, market_type: MarketType | str = MarketType.US) -> list[SearchResult]:
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        market_type = MarketType(market_type)

        if market_type in (MarketType.US_MF, MarketType.INDIA_MF):
            try:
                return await self._proxy.search(market_type, query)
            except Exception as exc:
                logger.warning("%s search failed for %r: %s", market_type.value, query, exc)
                return []

        demo_matches = self._demo.search(query, market_type, limit=MAX_RESULTS)

        if market_type is MarketType.INDIA:
            try:
                results = await self._proxy.search(market_type, query)
            except Exception as exc:
                logger.warning("Indian stock search failed for %r, using demo data: %s", query, exc)
            else:
                if results:
                    return results
            return demo_matches

        if demo_matches or market_type is not MarketType.US:
            return demo_matches

        try:
            self._limiter.check_and_consume()
            matches = await self._alpha_vantage.search_symbols(query, max_results=MAX_RESULTS)
        except Exception as exc:
            logger.error("Error searching stocks for %r: %s", query, exc)
            return demo_matches

        return [
            SearchResult(
                symbol=match["symbol"],
                name=match["name"],
                market_type=MarketType.US,
                currency=match.get("currency") or "USD",
                extra={"type": match.get("type", ""), "region": match.get("region", "")},
            )
            for match in matches
        ]
