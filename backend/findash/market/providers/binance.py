"""Binance public REST API for crypto quotes (free, no key)."""

from __future__ import annotations

import asyncio

import httpx

from ..errors import NoData
from ..models import MarketType, Quote
from .base import get_json

BASE_URL = "https://api.binance.com"


def pair_for(symbol: str) -> str:
    """BTC -> BTCUSDT"""
    return f"{symbol.upper()}USDT"


class BinanceClient:
    def __init__(self, client: httpx.AsyncClient, base_url: str = BASE_URL) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def ticker_quote(self, symbol: str) -> Quote:
        """Combine the 24h ticker with the latest trade price.

        Both requests are issued concurrently.
        """
        params = {"symbol": pair_for(symbol)}
        ticker, last = await asyncio.gather(
            get_json(self._client, f"{self._base_url}/api/v3/ticker/24hr", params=params, provider="Binance"),
            get_json(self._client, f"{self._base_url}/api/v3/ticker/price", params=params, provider="Binance"),
        )
        try:
            return Quote.create(
                symbol=symbol.upper(),
                price=float(last["price"]),
                market_type=MarketType.CRYPTO,
                change=float(ticker["priceChange"]),
                volume=float(ticker["volume"]),
                high=float(ticker["highPrice"]),
                low=float(ticker["lowPrice"]),
                open=float(ticker["openPrice"]),
                previous_close=float(ticker["prevClosePrice"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise NoData(f"Malformed Binance ticker for {symbol}") from exc
