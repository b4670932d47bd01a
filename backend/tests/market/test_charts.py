"""Tests for ChartRouter."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from findash.market.cache import TTLCache
from findash.market.charts import ChartRouter
from findash.market.demo import DemoDataGenerator
from findash.market.errors import NetworkFailure, RateLimited
from findash.market.models import ChartInterval, ChartPoint
from findash.market.rate_limiter import RateLimiter
from findash.market.request_queue import RequestQueue


def _series(n=3):
    start = date(2024, 1, 1)
    return [
        ChartPoint(date=start + timedelta(days=i), open=10.0, high=11.0, low=9.0, close=10.5, volume=100)
        for i in range(n)
    ]


@pytest.fixture
def harness(clock):
    alpha_vantage = MagicMock()
    alpha_vantage.time_series = AsyncMock(return_value=_series())
    proxy = MagicMock()
    proxy.indian_stock_chart = AsyncMock(return_value=_series(5))
    router = ChartRouter(
        TTLCache(clock=clock),
        RequestQueue(min_delay=0, clock=clock),
        RateLimiter(window=60, clock=clock),
        DemoDataGenerator(),
        alpha_vantage,
        proxy,
    )
    return router, alpha_vantage, proxy


@pytest.mark.asyncio
class TestChartRouter:
    """Tests for chart routing, caching and demo fallback."""

    async def test_crypto_always_demo(self, harness):
        """Test that crypto charts are always synthetic."""
        router, alpha_vantage, proxy = harness
        points = await router.fetch_chart_data("BTC", "daily", "crypto")

        assert len(points) == 365
        assert all(a.date < b.date for a, b in zip(points, points[1:]))
        alpha_vantage.time_series.assert_not_awaited()
        proxy.indian_stock_chart.assert_not_awaited()

    async def test_india_mf_always_demo(self, harness):
        """Test that Indian fund charts are always synthetic."""
        router, _, _ = harness
        assert len(await router.fetch_chart_data("120389", "daily", "india-mf")) == 365

    async def test_us_live_series(self, harness):
        """Test a live US series."""
        router, alpha_vantage, _ = harness
        points = await router.fetch_chart_data("IBM", "weekly", "us")
        assert points == _series()
        alpha_vantage.time_series.assert_awaited_once_with("IBM", ChartInterval.WEEKLY)

    async def test_us_mf_uses_alpha_vantage(self, harness):
        """Test that US fund charts use Alpha Vantage."""
        router, alpha_vantage, _ = harness
        await router.fetch_chart_data("VFIAX", "daily", "us-mf")
        alpha_vantage.time_series.assert_awaited_once()

    @pytest.mark.parametrize(
        "interval,expected",
        [("daily", ("1d", "1y")), ("weekly", ("1d", "5y")), ("monthly", ("1d", "max"))],
    )
    async def test_india_interval_mapping(self, harness, interval, expected):
        """Test the Yahoo interval and range per chart interval."""
        router, _, proxy = harness
        points = await router.fetch_chart_data("TCS", interval, "india")
        assert len(points) == 5
        proxy.indian_stock_chart.assert_awaited_once_with("TCS", *expected)

    async def test_failure_falls_back_to_demo(self, harness):
        """Test the demo series when the provider fails."""
        router, alpha_vantage, _ = harness
        alpha_vantage.time_series.side_effect = RateLimited("Note")
        points = await router.fetch_chart_data("AAPL", "daily", "us")
        assert len(points) == 365

    async def test_unknown_symbol_never_raises(self, harness):
        """Test that an unknown symbol still gets a series."""
        router, _, proxy = harness
        proxy.indian_stock_chart.side_effect = NetworkFailure("down")
        points = await router.fetch_chart_data("NOPE", "daily", "india")
        assert len(points) == 365

    async def test_us_charts_cached_five_minutes(self, harness, clock):
        """Test the US chart TTL."""
        router, alpha_vantage, _ = harness
        await router.fetch_chart_data("IBM", "daily", "us")
        clock.advance(299)
        await router.fetch_chart_data("IBM", "daily", "us")
        assert alpha_vantage.time_series.await_count == 1
        clock.advance(2)
        await router.fetch_chart_data("IBM", "daily", "us")
        assert alpha_vantage.time_series.await_count == 2

    async def test_other_charts_cached_thirty_minutes(self, harness, clock):
        """Test the TTL for other markets."""
        router, _, proxy = harness
        await router.fetch_chart_data("TCS", "daily", "india")
        clock.advance(1799)
        await router.fetch_chart_data("TCS", "daily", "india")
        assert proxy.indian_stock_chart.await_count == 1

    async def test_demo_series_is_cached(self, harness):
        """Test that a demo series is cached."""
        router, _, _ = harness
        first = await router.fetch_chart_data("BTC", "daily", "crypto")
        second = await router.fetch_chart_data("BTC", "daily", "crypto")
        assert first is second

    async def test_intervals_cached_separately(self, harness):
        """Test that each interval has its own cache entry."""
        router, alpha_vantage, _ = harness
        await router.fetch_chart_data("IBM", "daily", "us")
        await router.fetch_chart_data("IBM", "monthly", "us")
        assert alpha_vantage.time_series.await_count == 2
