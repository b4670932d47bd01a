"""Demo data fallback: static quotes plus synthetic daily chart series."""

from __future__ import annotations

import logging
from datetime import date, timedelta

import numpy as np

from .models import ChartPoint, MarketType, Quote, SearchResult
from .seed_quotes import DEFAULT_BASE_PRICE, DEFAULT_VOLUME, SEED_QUOTES

logger = logging.getLogger(__name__)


class DemoDataGenerator:
    """Terminal fallback for every fetch path. Never fails, never does I/O.

    Chart math (per day, independently):
        close  = base * (1 + U(-0.03, +0.03))
        open   = close * 0.995
        high   = close * 1.02
        low    = close * 0.98
        volume = base_volume * U(0.8, 1.2)

    high/low derive from close, so low <= open <= high is not guaranteed to
    bracket the day the way real bars do. Money is rounded to 2 decimals.
    """

    DAYS = 365
    PRICE_JITTER = 0.03
    VOLUME_RANGE = (0.8, 1.2)

    def __init__(
        self,
        quotes: dict[str, Quote] | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._quotes = SEED_QUOTES if quotes is None else quotes
        self._rng = rng or np.random.default_rng()

    def has(self, symbol: str) -> bool:
        return symbol in self._quotes

    def quote(self, symbol: str, market_type: MarketType | str | None = None) -> Quote | None:
        """Static demo quote for symbol, or None.

        When market_type is given the entry must belong to that market, so an
        INR listing is never served for a US lookup.
        """
        quote = self._quotes.get(symbol)
        if quote is None:
            return None
        if market_type is not None and quote.market_type != MarketType(market_type):
            return None
        return quote

    def generate_chart(
        self,
        symbol: str,
        base_price: float | None = None,
        days: int = DAYS,
        today: date | None = None,
    ) -> list[ChartPoint]:
        """Generate `days` daily bars ending today, oldest first."""
        seed = self._quotes.get(symbol)
        price = (seed.price if seed else None) or base_price or DEFAULT_BASE_PRICE
        volume = (seed.volume if seed else 0) or DEFAULT_VOLUME
        end = today or date.today()

        variation = self._rng.uniform(-self.PRICE_JITTER, self.PRICE_JITTER, size=days)
        volume_factor = self._rng.uniform(*self.VOLUME_RANGE, size=days)

        points: list[ChartPoint] = []
        for i in range(days):
            close = price * (1 + variation[i])
            points.append(
                ChartPoint(
                    date=end - timedelta(days=days - 1 - i),
                    open=round(close * 0.995, 2),
                    high=round(close * 1.02, 2),
                    low=round(close * 0.98, 2),
                    close=round(close, 2),
                    volume=int(volume * volume_factor[i]),
                )
            )
        logger.debug("Generated %d demo bars for %s around %.2f", days, symbol, price)
        return points

    def search(self, query: str, market_type: MarketType | str, limit: int = 10) -> list[SearchResult]:
        """Case-insensitive symbol/name match against the static table."""
        market_type = MarketType(market_type)
        needle = query.lower()
        results: list[SearchResult] = []
        for quote in self._quotes.values():
            if quote.market_type != market_type:
                continue
            if needle in quote.symbol.lower() or needle in quote.name.lower():
                results.append(
                    SearchResult(
                        symbol=quote.symbol,
                        name=quote.name,
                        market_type=market_type,
                        currency=quote.currency,
                    )
                )
                if len(results) >= limit:
                    break
        return results
