"""Error taxonomy for market data acquisition.

Provider adapters raise the specific subclasses. The quote and chart routers
absorb everything except QuoteUnavailable by falling back to demo data.
"""

from __future__ import annotations


class MarketDataError(Exception):
    """Base class for all market data failures."""


class InvalidSymbol(MarketDataError):
    """The provider explicitly rejected the symbol."""


class RateLimited(MarketDataError):
    """A provider quota or the local limiter was tripped."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RateLimitExceeded(RateLimited):
    """Raised by the local per-minute RateLimiter."""

    def __init__(self, wait_seconds: int) -> None:
        super().__init__(
            f"Rate limit: please wait {wait_seconds} seconds before making more requests",
            retry_after=float(wait_seconds),
        )
        self.wait_seconds = wait_seconds


class NoData(MarketDataError):
    """The provider answered but the payload was empty or malformed."""


class NetworkFailure(MarketDataError):
    """Transport-level failure (connection, timeout, 5xx)."""


class QuoteUnavailable(MarketDataError):
    """No live quote and no demo fallback exist for the symbol."""

    def __init__(self, symbol: str, market_type: str, reason: str | None = None) -> None:
        message = f"Quote unavailable for {symbol} ({market_type})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.symbol = symbol
        self.market_type = market_type
