"""Market data core for the findash dashboard.

Public API:
    MarketData            - Wired-up core: quotes, charts, search, realtime, feed
    create_market_data    - Factory that builds MarketData from a config
    MarketDataConfig      - Credentials, endpoints and timings
    Quote / QuoteUpdate   - Full snapshot and partial push update
    ChartPoint            - One daily OHLCV bar
    MarketType            - us / india / crypto / us-mf / india-mf
    QuoteUnavailable      - Raised when neither live nor demo data exists
    create_proxy_router   - FastAPI router for the provider proxy endpoints
    create_stream_router  - FastAPI router for the SSE quote stream
"""

from .config import MarketDataConfig
from .errors import (
    InvalidSymbol,
    MarketDataError,
    NetworkFailure,
    NoData,
    QuoteUnavailable,
    RateLimited,
    RateLimitExceeded,
)
from .factory import MarketData, create_market_data
from .models import ChartInterval, ChartPoint, MarketType, Quote, QuoteUpdate, SearchResult
from .proxy_api import create_proxy_router
from .stream import create_stream_router

__all__ = [
    "ChartInterval",
    "ChartPoint",
    "InvalidSymbol",
    "MarketData",
    "MarketDataConfig",
    "MarketDataError",
    "MarketType",
    "NetworkFailure",
    "NoData",
    "Quote",
    "QuoteUnavailable",
    "QuoteUpdate",
    "RateLimitExceeded",
    "RateLimited",
    "SearchResult",
    "create_market_data",
    "create_proxy_router",
    "create_stream_router",
]
