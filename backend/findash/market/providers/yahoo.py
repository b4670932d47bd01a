"""Yahoo Finance chart/search endpoints for NSE-listed Indian equities.

Used server-side by the proxy router; NSE symbols take a ".NS" suffix.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from ..errors import NoData
from ..models import ChartPoint, MarketType, Quote, SearchResult, normalize_series
from .base import BROWSER_HEADERS, get_json

logger = logging.getLogger(__name__)

BASE_URL = "https://query2.finance.yahoo.com"
NSE_SUFFIX = ".NS"


class YahooFinanceClient:
    def __init__(self, client: httpx.AsyncClient, base_url: str = BASE_URL) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def quote(self, symbol: str) -> Quote:
        result = await self._chart_result(symbol)
        meta = result.get("meta")
        if not meta:
            raise NoData(f"No data available for {symbol}")

        price = meta.get("regularMarketPrice") or 0
        previous_close = meta.get("chartPreviousClose") or meta.get("previousClose") or price
        return Quote.create(
            symbol=symbol,
            name=meta.get("longName") or meta.get("shortName") or symbol,
            price=price,
            market_type=MarketType.INDIA,
            change=price - previous_close,
            volume=meta.get("regularMarketVolume") or 0,
            high=meta.get("regularMarketDayHigh") or price,
            low=meta.get("regularMarketDayLow") or price,
            open=meta.get("regularMarketOpen") or price,
            previous_close=previous_close,
        )

    async def chart(self, symbol: str, interval: str = "1d", range_: str = "3mo") -> list[ChartPoint]:
        """Daily-or-coarser bars; points without a positive close are dropped."""
        result = await self._chart_result(symbol, {"interval": interval, "range": range_})
        timestamps = result.get("timestamp")
        quotes = (result.get("indicators") or {}).get("quote") or []
        if not timestamps or not quotes:
            raise NoData(f"No chart data available for {symbol}")

        bars = quotes[0]

        def column(name: str, index: int) -> float:
            values = bars.get(name) or []
            value = values[index] if index < len(values) else None
            return float(value) if value is not None else 0.0

        points: list[ChartPoint] = []
        for i, ts in enumerate(timestamps):
            close = column("close", i)
            if close <= 0:
                continue
            points.append(
                ChartPoint(
                    date=datetime.fromtimestamp(ts, tz=timezone.utc).date(),
                    open=round(column("open", i), 2),
                    high=round(column("high", i), 2),
                    low=round(column("low", i), 2),
                    close=round(close, 2),
                    volume=int(column("volume", i)),
                )
            )
        return normalize_series(points)

    async def search(self, query: str) -> list[SearchResult]:
        """NSE equities matching query, suffix stripped."""
        payload = await get_json(
            self._client,
            f"{self._base_url}/v1/finance/search",
            params={
                "q": query,
                "quotesCount": 15,
                "newsCount": 0,
                "enableFuzzyQuery": "false",
                "region": "IN",
                "lang": "en",
            },
            headers=BROWSER_HEADERS,
            provider="Yahoo Finance",
        )
        results: list[SearchResult] = []
        for item in payload.get("quotes") or []:
            symbol = item.get("symbol") or ""
            if not symbol.endswith(NSE_SUFFIX) or item.get("quoteType") != "EQUITY":
                continue
            results.append(
                SearchResult(
                    symbol=symbol[: -len(NSE_SUFFIX)],
                    name=item.get("longname") or item.get("shortname") or symbol,
                    market_type=MarketType.INDIA,
                    currency="INR",
                )
            )
        return results

    async def _chart_result(self, symbol: str, params: dict[str, str] | None = None) -> dict:
        payload = await get_json(
            self._client,
            f"{self._base_url}/v8/finance/chart/{symbol}{NSE_SUFFIX}",
            params=params,
            headers=BROWSER_HEADERS,
            provider="Yahoo Finance",
        )
        results = ((payload or {}).get("chart") or {}).get("result") or []
        if not results:
            raise NoData(f"No data available for {symbol}")
        return results[0]
