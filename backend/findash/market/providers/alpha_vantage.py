"""Alpha Vantage client: US equities and mutual funds (quota-constrained)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from ..errors import InvalidSymbol, NoData, RateLimited
from ..models import ChartInterval, ChartPoint, MarketType, Quote, normalize_series
from .base import get_json

logger = logging.getLogger(__name__)

BASE_URL = "https://www.alphavantage.co/query"

SERIES_FUNCTIONS: dict[ChartInterval, str] = {
    ChartInterval.DAILY: "TIME_SERIES_DAILY",
    ChartInterval.WEEKLY: "TIME_SERIES_WEEKLY",
    ChartInterval.MONTHLY: "TIME_SERIES_MONTHLY",
}


class AlphaVantageClient:
    """Thin async wrapper around the Alpha Vantage REST API.

    The free tier allows a handful of requests per minute, so callers are
    expected to gate every call through the RateLimiter and RequestQueue.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str = "demo",
        base_url: str = BASE_URL,
    ) -> None:
        self._client = client
        self._api_key = api_key or "demo"
        self._base_url = base_url.rstrip("/")

    @property
    def is_demo_key(self) -> bool:
        return self._api_key == "demo"

    async def global_quote(self, symbol: str, market_type: MarketType = MarketType.US) -> Quote:
        payload = await self._query({"function": "GLOBAL_QUOTE", "symbol": symbol}, symbol)
        quote = payload.get("Global Quote")
        if not quote:
            if self.is_demo_key:
                raise NoData("The demo API key has limited functionality; configure ALPHA_VANTAGE_API_KEY")
            raise NoData(f"No data available for symbol: {symbol}")

        try:
            return Quote.create(
                symbol=quote.get("01. symbol") or symbol,
                price=float(quote["05. price"]),
                market_type=market_type,
                change=float(quote.get("09. change") or 0),
                volume=int(quote.get("06. volume") or 0),
                high=float(quote.get("03. high") or 0),
                low=float(quote.get("04. low") or 0),
                open=float(quote.get("02. open") or 0),
                previous_close=float(quote.get("08. previous close") or 0),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise NoData(f"Malformed Global Quote for {symbol}") from exc

    async def time_series(self, symbol: str, interval: ChartInterval | str) -> list[ChartPoint]:
        """Fetch a compact daily/weekly/monthly series, oldest first."""
        function = SERIES_FUNCTIONS[ChartInterval(interval)]
        payload = await self._query(
            {"function": function, "symbol": symbol, "outputsize": "compact"},
            symbol,
        )
        series_key = next((key for key in payload if "Time Series" in key), None)
        if series_key is None:
            if self.is_demo_key:
                raise NoData("The demo API key has limited functionality; configure ALPHA_VANTAGE_API_KEY")
            raise NoData(f"No chart data available for symbol: {symbol}")

        points = parse_time_series(payload[series_key], symbol)
        if not points:
            raise NoData(f"Time series for {symbol} had no usable records")
        return points

    async def search_symbols(self, keywords: str, max_results: int = 10) -> list[dict[str, str]]:
        """SYMBOL_SEARCH, normalised to plain keys."""
        query = (keywords or "").strip()
        if not query:
            return []
        payload = await self._query({"function": "SYMBOL_SEARCH", "keywords": query}, query)

        results: list[dict[str, str]] = []
        for match in payload.get("bestMatches") or []:
            symbol = (match.get("1. symbol") or "").strip()
            if not symbol:
                continue
            results.append(
                {
                    "symbol": symbol,
                    "name": (match.get("2. name") or "").strip(),
                    "type": (match.get("3. type") or "").strip(),
                    "region": (match.get("4. region") or "").strip(),
                    "currency": (match.get("8. currency") or "").strip(),
                }
            )
        if max_results > 0:
            results = results[:max_results]
        return results

    # --- Internal ---

    async def _query(self, params: dict[str, str], subject: str) -> dict[str, Any]:
        payload = await get_json(
            self._client,
            self._base_url,
            params={**params, "apikey": self._api_key},
            provider="Alpha Vantage",
        )
        if not isinstance(payload, dict):
            raise NoData("Unexpected Alpha Vantage payload format")

        if payload.get("Error Message"):
            raise InvalidSymbol(f"Invalid symbol: {subject}")
        if payload.get("Note"):
            raise RateLimited(f"Alpha Vantage rate limit: {payload['Note']}")
        if payload.get("Information"):
            raise RateLimited(f"Alpha Vantage limit: {payload['Information']}")
        return payload


def parse_time_series(series: dict[str, Any], symbol: str = "") -> list[ChartPoint]:
    """Convert Alpha Vantage's date-keyed object into an ascending series.

    Records missing any OHLCV field, or with non-numeric text, are skipped.
    """
    points: list[ChartPoint] = []
    for day, record in series.items():
        try:
            points.append(
                ChartPoint(
                    date=date.fromisoformat(day),
                    open=round(float(record["1. open"]), 2),
                    high=round(float(record["2. high"]), 2),
                    low=round(float(record["3. low"]), 2),
                    close=round(float(record["4. close"]), 2),
                    volume=int(float(record["5. volume"])),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed bar %s for %s: %s", day, symbol, exc)
    return normalize_series(points)
