"""Provider adapters. Each one raises MarketDataError subclasses only."""

from .alpha_vantage import AlphaVantageClient
from .binance import BinanceClient
from .mfapi import MFAPIClient
from .proxy import ProxyClient
from .yahoo import YahooFinanceClient

__all__ = [
    "AlphaVantageClient",
    "BinanceClient",
    "MFAPIClient",
    "ProxyClient",
    "YahooFinanceClient",
]
