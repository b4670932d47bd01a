"""Configuration for the market data core."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class MarketDataConfig:
    """Credentials, endpoints and timings for the market data core.

    Components receive these values explicitly; only from_env() touches the
    process environment.
    """

    alpha_vantage_key: str = "demo"
    finnhub_key: str = ""
    proxy_base_url: str = "http://localhost:8000/api"
    alpha_vantage_url: str = "https://www.alphavantage.co/query"
    binance_url: str = "https://api.binance.com"
    http_timeout: float = 15.0

    # Quota-constrained provider guards
    request_min_delay: float = 12.0
    rate_limit_max: int = 5
    rate_limit_window: float = 60.0

    # Streaming
    reconnect_base_delay: float = 3.0
    max_reconnect_attempts: int = 5
    finnhub_min_key_length: int = 20

    # Quote feed polling fallback
    poll_interval: float = 30.0

    @classmethod
    def from_env(cls) -> MarketDataConfig:
        """Build a config from environment variables.

        - ALPHA_VANTAGE_API_KEY: empty -> "demo"
        - FINNHUB_API_KEY: empty -> equity streaming disabled
        - FINDASH_PROXY_URL: base URL of the proxy endpoints
        """
        defaults = cls()
        return cls(
            alpha_vantage_key=os.environ.get("ALPHA_VANTAGE_API_KEY", "").strip() or defaults.alpha_vantage_key,
            finnhub_key=os.environ.get("FINNHUB_API_KEY", "").strip(),
            proxy_base_url=os.environ.get("FINDASH_PROXY_URL", "").strip().rstrip("/") or defaults.proxy_base_url,
        )
