"""Server-side proxy endpoints consumed by ProxyClient.

These front providers that browsers cannot call directly (CORS, keys):

    GET /api/quote/indian-stock?symbol=S
    GET /api/chart/indian-stock?symbol=S&interval=I&range=R
    GET /api/quote/us-mutual-fund?symbol=S
    GET /api/quote/indian-mutual-fund?symbol=S
    GET /api/search/{market}?query=Q
"""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable

import httpx
from fastapi import APIRouter, HTTPException, Query

from .demo import DemoDataGenerator
from .errors import InvalidSymbol, MarketDataError, NoData, RateLimited
from .models import MarketType, SearchResult
from .providers import AlphaVantageClient, MFAPIClient, YahooFinanceClient

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
SEARCH_LIMITS: dict[MarketType, int] = {
    MarketType.US: 10,
    MarketType.INDIA: 15,
    MarketType.CRYPTO: 10,
    MarketType.US_MF: 20,
    MarketType.INDIA_MF: 50,
}

_FUND_SYMBOL = re.compile(r"^[A-Z]{5}$")
_FUND_PREFIXES = ("VFI", "VTS", "VTI", "VOO", "FXAIX", "SPAXX")


def _status_for(exc: MarketDataError) -> int:
    if isinstance(exc, (InvalidSymbol, NoData)):
        return 404
    if isinstance(exc, RateLimited):
        return 429
    return 502


async def _guard(description: str, call: Callable[[], Awaitable[Any]]) -> Any:
    try:
        return await call()
    except MarketDataError as exc:
        logger.error("%s failed: %s", description, exc)
        raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc


def _require(symbol: str | None) -> str:
    symbol = (symbol or "").strip()
    if not symbol:
        raise HTTPException(status_code=400, detail="Symbol is required")
    return symbol


def _is_us_fund(match: dict[str, str]) -> bool:
    symbol = match.get("symbol", "")
    return (
        "Mutual Fund" in match.get("type", "")
        or bool(_FUND_SYMBOL.match(symbol))
        or symbol.startswith(_FUND_PREFIXES)
    )


def create_proxy_router(
    http_client: httpx.AsyncClient,
    alpha_vantage_key: str = "demo",
    demo: DemoDataGenerator | None = None,
) -> APIRouter:
    """Create the proxy router around one shared upstream HTTP client."""
    router = APIRouter(prefix="/api", tags=["proxy"])
    yahoo = YahooFinanceClient(http_client)
    mfapi = MFAPIClient(http_client)
    alpha_vantage = AlphaVantageClient(http_client, alpha_vantage_key)
    demo = demo or DemoDataGenerator()

    @router.get("/quote/indian-stock")
    async def indian_stock_quote(symbol: str | None = None) -> dict[str, Any]:
        symbol = _require(symbol)
        quote = await _guard(f"Yahoo quote {symbol}", lambda: yahoo.quote(symbol))
        return quote.to_dict()

    @router.get("/chart/indian-stock")
    async def indian_stock_chart(
        symbol: str | None = None,
        interval: str = "1d",
        range_: str = Query("3mo", alias="range"),
    ) -> dict[str, Any]:
        symbol = _require(symbol)
        points = await _guard(f"Yahoo chart {symbol}", lambda: yahoo.chart(symbol, interval, range_))
        return {"chartData": [point.to_dict() for point in points]}

    @router.get("/quote/us-mutual-fund")
    async def us_mutual_fund_quote(symbol: str | None = None) -> dict[str, Any]:
        symbol = _require(symbol)
        quote = await _guard(
            f"Alpha Vantage fund quote {symbol}",
            lambda: alpha_vantage.global_quote(symbol, MarketType.US_MF),
        )
        return quote.to_dict()

    @router.get("/quote/indian-mutual-fund")
    async def indian_mutual_fund_quote(symbol: str | None = None) -> dict[str, Any]:
        symbol = _require(symbol)
        quote = await _guard(f"MFAPI quote {symbol}", lambda: mfapi.quote(symbol))
        return quote.to_dict()

    @router.get("/search/{market}")
    async def search(market: MarketType, query: str = "") -> dict[str, Any]:
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return {"results": []}
        limit = SEARCH_LIMITS[market]

        results: list[SearchResult]
        if market is MarketType.INDIA:
            results = await _guard("Yahoo search", lambda: yahoo.search(query))
        elif market is MarketType.INDIA_MF:
            results = await _guard("MFAPI search", lambda: mfapi.search(query, limit))
        elif market in (MarketType.US, MarketType.US_MF):
            matches = await _guard("Alpha Vantage search", lambda: alpha_vantage.search_symbols(query, 0))
            default_type = ""
            if market is MarketType.US_MF:
                matches = [m for m in matches if _is_us_fund(m)]
                default_type = "Mutual Fund"
            results = [
                SearchResult(
                    symbol=m["symbol"],
                    name=m["name"],
                    market_type=market,
                    currency=market.currency,
                    extra={"type": m.get("type") or default_type, "region": m.get("region", "")},
                )
                for m in matches
            ]
        else:
            results = demo.search(query, market, limit)

        return {"results": [result.to_dict() for result in results[:limit]]}

    return router
