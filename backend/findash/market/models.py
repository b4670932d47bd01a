"""Data models for market data."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Iterable


class MarketType(str, Enum):
    """Routing discriminator selecting which provider set serves a symbol."""

    US = "us"
    INDIA = "india"
    CRYPTO = "crypto"
    US_MF = "us-mf"
    INDIA_MF = "india-mf"

    @property
    def currency(self) -> str:
        """'USD' for US and crypto markets, 'INR' for Indian ones."""
        if self in (MarketType.INDIA, MarketType.INDIA_MF):
            return "INR"
        return "USD"


class ChartInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _money(value: float | None) -> float | None:
    if value is None:
        return None
    return round(float(value), 2)


@dataclass(frozen=True, slots=True)
class Quote:
    """Immutable point-in-time price snapshot for a symbol.

    Build instances with Quote.create() so that change_percent always agrees
    with change / previous_close.
    """

    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    volume: int
    market_type: MarketType
    currency: str
    high: float | None = None
    low: float | None = None
    open: float | None = None
    previous_close: float | None = None

    @classmethod
    def create(
        cls,
        symbol: str,
        price: float,
        market_type: MarketType | str,
        *,
        name: str | None = None,
        change: float = 0.0,
        volume: float | int = 0,
        high: float | None = None,
        low: float | None = None,
        open: float | None = None,
        previous_close: float | None = None,
        currency: str | None = None,
    ) -> Quote:
        """Normalize raw provider numbers into a Quote.

        Money is rounded to 2 decimals and volume is truncated to a
        non-negative int. Mutual funds have no traded volume and always
        report 0. change_percent is derived from change and previous_close
        (0 when previous_close is missing or zero).
        """
        market_type = MarketType(market_type)
        if market_type in (MarketType.US_MF, MarketType.INDIA_MF):
            volume = 0
        change = round(float(change), 2)
        previous_close = _money(previous_close)
        if previous_close:
            change_percent = round(change / previous_close * 100, 2)
        else:
            change_percent = 0.0
        return cls(
            symbol=symbol,
            name=name or symbol,
            price=round(float(price), 2),
            change=change,
            change_percent=change_percent,
            volume=max(0, int(volume or 0)),
            market_type=market_type,
            currency=currency or market_type.currency,
            high=_money(high),
            low=_money(low),
            open=_money(open),
            previous_close=previous_close,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], market_type: MarketType | str | None = None) -> Quote:
        """Parse the camelCase wire shape served by the proxy endpoints."""
        market = market_type or data.get("marketType")
        if market is None:
            raise ValueError("Quote payload has no marketType")
        return cls.create(
            symbol=str(data["symbol"]),
            price=float(data["price"]),
            market_type=market,
            name=data.get("name"),
            change=float(data.get("change") or 0.0),
            volume=data.get("volume") or 0,
            high=data.get("high"),
            low=data.get("low"),
            open=data.get("open"),
            previous_close=data.get("previousClose"),
            currency=data.get("currency"),
        )

    def merge(self, update: QuoteUpdate) -> Quote:
        """Apply a partial push update.

        Only fields carried by the update are replaced; name and change
        fields are kept when the stream does not report them.
        """
        changes: dict[str, Any] = {"price": round(update.price, 2)}
        for attr in ("change", "change_percent", "high", "low", "open", "previous_close"):
            value = getattr(update, attr)
            if value is not None:
                changes[attr] = round(value, 2)
        if update.volume is not None:
            changes["volume"] = max(0, int(update.volume))
        if "change" in changes:
            previous_close = changes.get("previous_close", self.previous_close)
            if previous_close:
                changes["change_percent"] = round(changes["change"] / previous_close * 100, 2)
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON transmission (camelCase keys)."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "volume": self.volume,
            "high": self.high,
            "low": self.low,
            "open": self.open,
            "previousClose": self.previous_close,
            "marketType": self.market_type.value,
            "currency": self.currency,
        }


@dataclass(frozen=True, slots=True)
class QuoteUpdate:
    """Partial quote pushed by a streaming provider.

    Equity trade pushes carry only price and volume; crypto ticker pushes
    carry the full set of day statistics.
    """

    symbol: str
    market_type: MarketType
    price: float
    volume: float | None = None
    change: float | None = None
    change_percent: float | None = None
    high: float | None = None
    low: float | None = None
    open: float | None = None
    previous_close: float | None = None

    def to_quote(self) -> Quote:
        """Promote to a full Quote when nothing is known about the symbol yet."""
        return Quote.create(
            symbol=self.symbol,
            price=self.price,
            market_type=self.market_type,
            change=self.change or 0.0,
            volume=self.volume or 0,
            high=self.high,
            low=self.low,
            open=self.open,
            previous_close=self.previous_close,
        )


@dataclass(frozen=True, slots=True)
class ChartPoint:
    """One daily OHLCV bar."""

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


def normalize_series(points: Iterable[ChartPoint]) -> list[ChartPoint]:
    """Sort bars by date and drop duplicate dates, keeping the first seen."""
    seen: dict[date, ChartPoint] = {}
    for point in points:
        seen.setdefault(point.date, point)
    return [seen[d] for d in sorted(seen)]


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A symbol lookup hit, without price data."""

    symbol: str
    name: str
    market_type: MarketType
    currency: str
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "marketType": self.market_type.value,
            "currency": self.currency,
            **self.extra,
        }
