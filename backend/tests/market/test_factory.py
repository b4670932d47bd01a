"""Tests for configuration and the market data factory."""

import os
from unittest.mock import patch

import httpx
import pytest

from findash.market import MarketData, MarketDataConfig, create_market_data
from findash.market.models import MarketType


class TestMarketDataConfig:
    """Tests for MarketDataConfig."""

    def test_defaults_when_env_empty(self):
        """Test defaults with an empty environment."""
        with patch.dict(os.environ, {}, clear=True):
            config = MarketDataConfig.from_env()

        assert config.alpha_vantage_key == "demo"
        assert config.finnhub_key == ""
        assert config.proxy_base_url == "http://localhost:8000/api"

    def test_whitespace_key_means_demo(self):
        """Test that a blank key means the demo key."""
        with patch.dict(os.environ, {"ALPHA_VANTAGE_API_KEY": "   "}, clear=True):
            assert MarketDataConfig.from_env().alpha_vantage_key == "demo"

    def test_reads_keys_and_proxy_url(self):
        """Test reading keys and the proxy URL."""
        env = {
            "ALPHA_VANTAGE_API_KEY": "av-key",
            "FINNHUB_API_KEY": "f" * 20,
            "FINDASH_PROXY_URL": "https://dash.example.com/api/",
        }
        with patch.dict(os.environ, env, clear=True):
            config = MarketDataConfig.from_env()

        assert config.alpha_vantage_key == "av-key"
        assert config.finnhub_key == "f" * 20
        assert config.proxy_base_url == "https://dash.example.com/api"

    def test_timing_defaults(self):
        """Test the timing defaults."""
        config = MarketDataConfig()
        assert config.request_min_delay == 12.0
        assert config.rate_limit_max == 5
        assert config.rate_limit_window == 60.0
        assert config.reconnect_base_delay == 3.0
        assert config.max_reconnect_attempts == 5


class TestFactory:
    """Tests for create_market_data."""

    def test_builds_from_env_when_no_config(self):
        """Test building from the environment."""
        with patch.dict(os.environ, {}, clear=True):
            market_data = create_market_data()

        assert isinstance(market_data, MarketData)
        assert market_data.config.alpha_vantage_key == "demo"

    def test_equity_streaming_disabled_without_finnhub_key(self, connector):
        """Test no equity streaming without a Finnhub key."""
        market_data = create_market_data(MarketDataConfig(), connector=connector)
        assert not market_data.realtime.is_enabled("us")
        assert market_data.realtime.is_enabled("crypto")

    def test_equity_streaming_enabled_with_finnhub_key(self, connector):
        """Test equity streaming with a Finnhub key."""
        market_data = create_market_data(MarketDataConfig(finnhub_key="f" * 20), connector=connector)
        assert market_data.realtime.is_enabled("us")

    def test_components_share_cache(self):
        """Test that routers share one cache."""
        market_data = create_market_data(MarketDataConfig())
        assert market_data.quotes._cache is market_data.cache
        assert market_data.charts._cache is market_data.cache
        assert market_data.feed._router is market_data.quotes


@pytest.mark.asyncio
class TestMarketDataEndToEnd:
    """End-to-end tests over mocked transports."""

    async def test_quota_note_falls_back_to_demo(self, mock_http, connector):
        """Test the demo quote on a quota note."""
        def handler(request):
            return httpx.Response(200, json={"Note": "API call frequency exceeded"})

        market_data = create_market_data(MarketDataConfig(), http_client=mock_http(handler), connector=connector)
        try:
            quote = await market_data.fetch_quote("AAPL", "us")
            chart = await market_data.fetch_chart_data("BTC", "daily", "crypto")
        finally:
            await market_data.aclose()

        assert quote.price == 195.71
        assert quote.market_type is MarketType.US
        assert len(chart) == 365

    async def test_subscribe_delegates_to_realtime(self, mock_http, connector, settle):
        """Test that subscribe goes to the realtime manager."""
        market_data = create_market_data(
            MarketDataConfig(),
            http_client=mock_http(lambda request: httpx.Response(500)),
            connector=connector,
        )
        received = []
        unsubscribe = market_data.subscribe("BTC", "crypto", received.append)
        await settle()

        assert market_data.is_connected("crypto")
        assert not market_data.is_connected("us")
        unsubscribe()
        await market_data.aclose()
