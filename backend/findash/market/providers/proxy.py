"""Client for the findash proxy endpoints (see proxy_api.py)."""

from __future__ import annotations

from datetime import date

import httpx

from ..errors import NoData
from ..models import ChartPoint, MarketType, Quote, SearchResult, normalize_series
from .base import get_json


class ProxyClient:
    """Talks to the server-side proxy that fronts Yahoo Finance, MFAPI and
    Alpha Vantage fund quotes.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def indian_stock_quote(self, symbol: str) -> Quote:
        return await self._quote("/quote/indian-stock", symbol, MarketType.INDIA)

    async def us_mutual_fund_quote(self, symbol: str) -> Quote:
        return await self._quote("/quote/us-mutual-fund", symbol, MarketType.US_MF)

    async def indian_mutual_fund_quote(self, symbol: str) -> Quote:
        return await self._quote("/quote/indian-mutual-fund", symbol, MarketType.INDIA_MF)

    async def indian_stock_chart(self, symbol: str, interval: str, range_: str) -> list[ChartPoint]:
        payload = await get_json(
            self._client,
            f"{self._base_url}/chart/indian-stock",
            params={"symbol": symbol, "interval": interval, "range": range_},
            provider="proxy",
        )
        rows = payload.get("chartData") if isinstance(payload, dict) else None
        if not rows:
            raise NoData(f"No chart data available for {symbol}")
        try:
            points = [
                ChartPoint(
                    date=date.fromisoformat(row["date"]),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=int(row["volume"]),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise NoData(f"Malformed chart data for {symbol}") from exc
        return normalize_series(points)

    async def search(self, market_type: MarketType | str, query: str) -> list[SearchResult]:
        market_type = MarketType(market_type)
        payload = await get_json(
            self._client,
            f"{self._base_url}/search/{market_type.value}",
            params={"query": query},
            provider="proxy",
        )
        rows = payload.get("results") if isinstance(payload, dict) else None
        results: list[SearchResult] = []
        for item in rows or []:
            symbol = str(item.get("symbol") or "")
            if not symbol:
                continue
            extra = {k: v for k, v in item.items() if k not in ("symbol", "name", "marketType", "currency")}
            results.append(
                SearchResult(
                    symbol=symbol,
                    name=item.get("name") or symbol,
                    market_type=market_type,
                    currency=market_type.currency,
                    extra=extra,
                )
            )
        return results

    async def _quote(self, path: str, symbol: str, market_type: MarketType) -> Quote:
        payload = await get_json(
            self._client,
            f"{self._base_url}{path}",
            params={"symbol": symbol},
            provider="proxy",
        )
        try:
            return Quote.from_dict(payload, market_type)
        except (KeyError, TypeError, ValueError) as exc:
            raise NoData(f"Malformed proxy quote for {symbol}") from exc
