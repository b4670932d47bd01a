"""Static demo quotes used when a live provider fails or is unsupported."""

from __future__ import annotations

from .models import MarketType, Quote

# symbol: (name, price, change, volume, high, low, open, previous_close)
_US: dict[str, tuple] = {
    "AAPL": ("Apple Inc.", 195.71, 2.35, 45678900, 196.50, 193.20, 194.10, 193.36),
    "GOOGL": ("Alphabet Inc.", 140.93, -1.23, 23456789, 142.10, 140.20, 141.50, 142.16),
    "MSFT": ("Microsoft Corporation", 374.58, 3.42, 34567890, 375.80, 371.20, 372.00, 371.16),
    "AMZN": ("Amazon.com Inc.", 178.25, -0.85, 28901234, 179.50, 177.10, 178.90, 179.10),
    "TSLA": ("Tesla Inc.", 248.42, 5.67, 56789012, 250.00, 242.80, 243.50, 242.75),
    "META": ("Meta Platforms Inc.", 474.99, 4.20, 18901234, 476.50, 470.30, 471.20, 470.79),
    "NVDA": ("NVIDIA Corporation", 495.22, 8.15, 41234567, 497.80, 487.50, 488.90, 487.07),
    "NFLX": ("Netflix Inc.", 638.33, -3.21, 12345678, 642.00, 635.20, 640.50, 641.54),
}

# NSE listings
_INDIA: dict[str, tuple] = {
    "RELIANCE": ("Reliance Industries Ltd.", 2845.50, 32.75, 8765432, 2860.00, 2810.20, 2820.00, 2812.75),
    "TCS": ("Tata Consultancy Services Ltd.", 3678.90, -15.40, 2345678, 3695.00, 3670.20, 3685.00, 3694.30),
    "INFY": ("Infosys Ltd.", 1456.75, 12.30, 5432109, 1462.00, 1445.50, 1448.20, 1444.45),
    "HDFCBANK": ("HDFC Bank Ltd.", 1689.25, 8.90, 7654321, 1695.00, 1678.40, 1682.00, 1680.35),
    "ICICIBANK": ("ICICI Bank Ltd.", 1089.60, -5.20, 6543210, 1096.80, 1085.30, 1092.50, 1094.80),
    "SBIN": ("State Bank of India", 625.40, 7.65, 12345678, 628.90, 618.20, 620.50, 617.75),
    "BHARTIARTL": ("Bharti Airtel Ltd.", 1523.80, 18.45, 4567890, 1530.00, 1508.60, 1512.00, 1505.35),
    "WIPRO": ("Wipro Ltd.", 432.15, -3.25, 3456789, 436.50, 430.20, 434.80, 435.40),
    "ITC": ("ITC Ltd.", 456.80, 5.45, 9876543, 459.00, 450.20, 451.50, 451.35),
    "AXISBANK": ("Axis Bank Ltd.", 1098.75, -8.25, 5678901, 1108.50, 1095.20, 1105.00, 1107.00),
    "LT": ("Larsen & Toubro Ltd.", 3456.90, 42.30, 3456789, 3475.00, 3420.50, 3430.00, 3414.60),
    "SUNPHARMA": ("Sun Pharmaceutical Industries Ltd.", 1678.45, -12.55, 2345678, 1695.00, 1672.30, 1688.00, 1691.00),
    "KOTAKBANK": ("Kotak Mahindra Bank Ltd.", 1823.60, 15.80, 4567890, 1835.00, 1810.20, 1815.00, 1807.80),
    "HINDUNILVR": ("Hindustan Unilever Ltd.", 2567.90, 18.90, 1234567, 2580.00, 2545.20, 2555.00, 2549.00),
    "MARUTI": ("Maruti Suzuki India Ltd.", 12456.75, -85.25, 876543, 12580.00, 12420.50, 12525.00, 12542.00),
    "TATAMOTORS": ("Tata Motors Ltd.", 789.45, 12.65, 15678901, 795.00, 775.20, 780.00, 776.80),
    "ASIANPAINT": ("Asian Paints Ltd.", 2987.60, -22.40, 987654, 3015.00, 2975.20, 3005.00, 3010.00),
    "ULTRACEMCO": ("UltraTech Cement Ltd.", 9876.45, 125.55, 567890, 9920.00, 9750.20, 9800.00, 9750.90),
    "BAJFINANCE": ("Bajaj Finance Ltd.", 6789.30, -45.70, 1234567, 6850.00, 6765.20, 6820.00, 6835.00),
    "ONGC": ("Oil and Natural Gas Corporation Ltd.", 245.80, 3.45, 23456789, 248.00, 241.50, 243.00, 242.35),
}

_CRYPTO: dict[str, tuple] = {
    "BTC": ("Bitcoin", 95847.32, 1245.67, 28901234567, 96500.00, 94200.50, 94601.65, 94601.65),
    "ETH": ("Ethereum", 3524.89, -45.23, 15678901234, 3580.00, 3510.20, 3570.12, 3570.12),
    "BNB": ("Binance Coin", 689.42, 12.35, 2345678901, 695.00, 675.50, 677.07, 677.07),
    "SOL": ("Solana", 198.76, 8.92, 5678901234, 202.50, 188.30, 189.84, 189.84),
    "XRP": ("Ripple", 2.35, 0.08, 8901234567, 2.42, 2.25, 2.27, 2.27),
    "ADA": ("Cardano", 1.02, -0.03, 3456789012, 1.06, 1.00, 1.05, 1.05),
    "DOGE": ("Dogecoin", 0.32, 0.02, 9012345678, 0.33, 0.29, 0.30, 0.30),
    "MATIC": ("Polygon", 1.15, 0.05, 2345678901, 1.18, 1.08, 1.10, 1.10),
}

_US_MF: dict[str, tuple] = {
    "VFIAX": ("Vanguard 500 Index Fund Admiral", 412.50, 3.25, 0, 413.20, 410.80, 411.00, 409.25),
    "VTSAX": ("Vanguard Total Stock Market Index Admiral", 115.75, 0.85, 0, 116.00, 115.20, 115.40, 114.90),
    "FXAIX": ("Fidelity 500 Index Fund", 178.90, 1.40, 0, 179.20, 178.10, 178.30, 177.50),
}

_INDIA_MF: dict[str, tuple] = {
    "AXISELIQUID": ("Axis Liquid Fund - Direct Growth", 2456.78, 1.23, 0, 2457.00, 2456.50, 2456.60, 2455.55),
    "ICICIPRULIFE": ("ICICI Prudential Equity & Debt Fund", 189.45, 2.15, 0, 190.00, 188.50, 188.80, 187.30),
    "HDFCTOP100": ("HDFC Top 100 Fund - Direct Growth", 678.90, 5.45, 0, 680.00, 675.20, 676.50, 673.45),
}

_TABLES: dict[MarketType, dict[str, tuple]] = {
    MarketType.US: _US,
    MarketType.INDIA: _INDIA,
    MarketType.CRYPTO: _CRYPTO,
    MarketType.US_MF: _US_MF,
    MarketType.INDIA_MF: _INDIA_MF,
}


def _build() -> dict[str, Quote]:
    quotes: dict[str, Quote] = {}
    for market_type, table in _TABLES.items():
        for symbol, (name, price, change, volume, high, low, open_, prev) in table.items():
            quotes[symbol] = Quote.create(
                symbol=symbol,
                name=name,
                price=price,
                change=change,
                volume=volume,
                high=high,
                low=low,
                open=open_,
                previous_close=prev,
                market_type=market_type,
            )
    return quotes


# Loaded once at import; read-only for the life of the process
SEED_QUOTES: dict[str, Quote] = _build()

# Default watch sets per market (what a freshly added widget shows)
DEFAULT_SYMBOLS: dict[MarketType, list[str]] = {
    market_type: list(table) for market_type, table in _TABLES.items()
}

DEFAULT_GAINERS: list[str] = ["GOOGL", "TSLA", "AMZN", "META", "NVDA"]

# Volume used for synthetic chart data when the table has none
DEFAULT_VOLUME = 10_000_000
DEFAULT_BASE_PRICE = 100.0
