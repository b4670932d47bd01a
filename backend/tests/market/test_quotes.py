"""Tests for QuoteRouter routing, caching and demo fallback."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from findash.market.cache import TTLCache
from findash.market.demo import DemoDataGenerator
from findash.market.errors import InvalidSymbol, NetworkFailure, QuoteUnavailable
from findash.market.models import MarketType, Quote
from findash.market.quotes import QuoteRouter, quote_cache_key
from findash.market.rate_limiter import RateLimiter
from findash.market.request_queue import RequestQueue


def _live(symbol, price=100.0, market_type="us", change=1.0):
    return Quote.create(symbol=symbol, price=price, market_type=market_type, change=change, previous_close=price - change)


class Harness:
    """QuoteRouter wired to mocked provider clients."""

    def __init__(self, clock, max_requests=5):
        self.cache = TTLCache(clock=clock)
        self.queue = RequestQueue(min_delay=0, clock=clock)
        self.limiter = RateLimiter(max_requests=max_requests, window=60, clock=clock)
        self.alpha_vantage = MagicMock()
        self.alpha_vantage.global_quote = AsyncMock(side_effect=lambda symbol, market_type: _live(symbol))
        self.binance = MagicMock()
        self.binance.ticker_quote = AsyncMock(side_effect=lambda symbol: _live(symbol, 95000.0, "crypto"))
        self.proxy = MagicMock()
        self.proxy.indian_stock_quote = AsyncMock(side_effect=lambda symbol: _live(symbol, 2800.0, "india"))
        self.proxy.us_mutual_fund_quote = AsyncMock(side_effect=lambda symbol: _live(symbol, 400.0, "us-mf"))
        self.proxy.indian_mutual_fund_quote = AsyncMock(side_effect=lambda symbol: _live(symbol, 50.0, "india-mf"))
        self.router = QuoteRouter(
            self.cache,
            self.queue,
            self.limiter,
            DemoDataGenerator(),
            self.alpha_vantage,
            self.binance,
            self.proxy,
        )


@pytest.mark.asyncio
class TestFetchQuote:
    """Tests for single quote routing."""

    async def test_live_us_quote(self, clock):
        """Test a live US quote from Alpha Vantage."""
        h = Harness(clock)
        quote = await h.router.fetch_quote("IBM", "us")
        assert quote.price == 100.0
        h.alpha_vantage.global_quote.assert_awaited_once_with("IBM", MarketType.US)

    async def test_routes_each_market(self, clock):
        """Test that each market goes to its provider."""
        h = Harness(clock)
        assert (await h.router.fetch_quote("RELIANCE", "india")).market_type is MarketType.INDIA
        assert (await h.router.fetch_quote("BTC", "crypto")).market_type is MarketType.CRYPTO
        assert (await h.router.fetch_quote("VFIAX", "us-mf")).market_type is MarketType.US_MF
        assert (await h.router.fetch_quote("120389", "india-mf")).market_type is MarketType.INDIA_MF
        h.proxy.indian_stock_quote.assert_awaited_once_with("RELIANCE")
        h.binance.ticker_quote.assert_awaited_once_with("BTC")
        h.proxy.us_mutual_fund_quote.assert_awaited_once_with("VFIAX")
        h.proxy.indian_mutual_fund_quote.assert_awaited_once_with("120389")

    async def test_crypto_bypasses_queue(self, clock):
        """Test that crypto quotes skip the request queue."""
        h = Harness(clock)
        with patch.object(h.queue, "add", wraps=h.queue.add) as add:
            await h.router.fetch_quote("BTC", "crypto")
            add.assert_not_called()
            await h.router.fetch_quote("RELIANCE", "india")
            add.assert_called_once()

    async def test_demo_fallback_on_provider_failure(self, clock):
        """Test the demo quote when the provider fails."""
        h = Harness(clock)
        h.alpha_vantage.global_quote.side_effect = NetworkFailure("down")

        quote = await h.router.fetch_quote("AAPL", "us")

        assert quote.price == 195.71
        assert quote.name == "Apple Inc."

    async def test_demo_fallback_when_rate_limited(self, clock):
        """Test the demo quote when the local limit is hit."""
        h = Harness(clock, max_requests=0)
        quote = await h.router.fetch_quote("AAPL", "us")
        assert quote.price == 195.71
        h.alpha_vantage.global_quote.assert_not_awaited()

    async def test_unavailable_without_demo_entry(self, clock):
        """Test the error when no demo quote exists."""
        h = Harness(clock)
        h.alpha_vantage.global_quote.side_effect = InvalidSymbol("Invalid symbol: ZZZZ")

        with pytest.raises(QuoteUnavailable) as exc_info:
            await h.router.fetch_quote("ZZZZ", "us")

        assert exc_info.value.symbol == "ZZZZ"
        assert exc_info.value.market_type == "us"

    async def test_demo_entry_must_match_market(self, clock):
        """Test that a demo quote from another market is not used."""
        h = Harness(clock)
        h.proxy.indian_stock_quote.side_effect = NetworkFailure("down")
        with pytest.raises(QuoteUnavailable):
            await h.router.fetch_quote("AAPL", "india")

    async def test_live_quote_cached_for_market_ttl(self, clock):
        """Test the live quote TTL."""
        h = Harness(clock)
        await h.router.fetch_quote("IBM", "us")
        clock.advance(29)
        await h.router.fetch_quote("IBM", "us")
        assert h.alpha_vantage.global_quote.await_count == 1

        clock.advance(2)
        await h.router.fetch_quote("IBM", "us")
        assert h.alpha_vantage.global_quote.await_count == 2

    async def test_india_ttl_is_longer(self, clock):
        """Test the longer TTL for Indian quotes."""
        h = Harness(clock)
        await h.router.fetch_quote("RELIANCE", "india")
        clock.advance(119)
        await h.router.fetch_quote("RELIANCE", "india")
        assert h.proxy.indian_stock_quote.await_count == 1

    async def test_demo_quote_cached_for_one_minute(self, clock):
        """Test the demo quote TTL."""
        h = Harness(clock)
        h.alpha_vantage.global_quote.side_effect = NetworkFailure("down")
        await h.router.fetch_quote("AAPL", "us")
        clock.advance(59)
        await h.router.fetch_quote("AAPL", "us")
        assert h.alpha_vantage.global_quote.await_count == 1

        clock.advance(2)
        await h.router.fetch_quote("AAPL", "us")
        assert h.alpha_vantage.global_quote.await_count == 2

    async def test_bypass_cache(self, clock):
        """Test that bypass_cache forces a fetch."""
        h = Harness(clock)
        await h.router.fetch_quote("IBM", "us")
        await h.router.fetch_quote("IBM", "us", bypass_cache=True)
        assert h.alpha_vantage.global_quote.await_count == 2

    async def test_cache_is_keyed_by_market(self, clock):
        """Test that the same symbol is cached per market."""
        h = Harness(clock)
        await h.router.fetch_quote("BTC", "crypto")
        assert quote_cache_key("BTC", MarketType.CRYPTO) in h.cache
        assert quote_cache_key("BTC", MarketType.US) not in h.cache


@pytest.mark.asyncio
class TestFetchMultipleQuotes:
    """Tests for batch quote fetching."""

    async def test_unresolved_symbols_are_dropped(self, clock):
        """Test that failed symbols are left out."""
        h = Harness(clock)
        h.alpha_vantage.global_quote.side_effect = NetworkFailure("down")

        quotes = await h.router.fetch_multiple_quotes(["AAPL", "ZZZZ"], "us")

        assert [q.symbol for q in quotes] == ["AAPL"]

    async def test_empty_input(self, clock):
        """Test an empty symbol list."""
        assert await Harness(clock).router.fetch_multiple_quotes([], "us") == []

    async def test_all_symbols_resolved(self, clock):
        """Test that results keep the input order."""
        h = Harness(clock)
        quotes = await h.router.fetch_multiple_quotes(["BTC", "ETH", "SOL"], "crypto")
        assert sorted(q.symbol for q in quotes) == ["BTC", "ETH", "SOL"]


@pytest.mark.asyncio
class TestMarketGainers:
    """Tests for the market gainers list."""

    async def test_sorted_by_change_percent(self, clock):
        """Test ordering by change percent."""
        h = Harness(clock)
        h.alpha_vantage.global_quote.side_effect = NetworkFailure("down")

        gainers = await h.router.fetch_market_gainers()

        assert sorted(q.symbol for q in gainers) == ["AMZN", "GOOGL", "META", "NVDA", "TSLA"]
        percents = [q.change_percent for q in gainers]
        assert percents == sorted(percents, reverse=True)

    async def test_cached(self, clock):
        """Test that gainers are cached."""
        h = Harness(clock)
        await h.router.fetch_market_gainers(["IBM"])
        await h.router.fetch_market_gainers(["IBM"])
        assert h.alpha_vantage.global_quote.await_count == 1

    async def test_cache_keyed_by_symbol_set(self, clock):
        """Test that a different symbol set is not served from cache."""
        h = Harness(clock)
        await h.router.fetch_market_gainers(["AAPL"])
        gainers = await h.router.fetch_market_gainers(["MSFT", "NFLX"])
        assert sorted(q.symbol for q in gainers) == ["MSFT", "NFLX"]

    async def test_symbol_order_shares_cache_entry(self, clock):
        """Test that symbol order does not change the cache key."""
        h = Harness(clock)
        first = await h.router.fetch_market_gainers(["MSFT", "NFLX"])
        second = await h.router.fetch_market_gainers(["NFLX", "MSFT"])
        assert second is first
