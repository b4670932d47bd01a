"""Realtime push quotes over WebSocket (Finnhub equities, Binance crypto)."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine

import websockets
from websockets.exceptions import ConnectionClosed

from .models import MarketType, QuoteUpdate

logger = logging.getLogger(__name__)

QuoteCallback = Callable[[QuoteUpdate], None]
Connector = Callable[[str], Awaitable[Any]]


async def default_connector(url: str) -> Any:
    return await websockets.connect(url, ping_interval=20)


class StreamProtocol(ABC):
    """Wire format of one streaming provider."""

    name: str
    market_type: MarketType

    @abstractmethod
    def url(self) -> str: ...

    @abstractmethod
    def subscribe_frames(self, symbols: list[str]) -> list[dict[str, Any]]:
        """Frames that subscribe to symbols (empty list when there are none)."""

    def unsubscribe_frame(self, symbol: str) -> dict[str, Any] | None:
        """Frame that drops one symbol, or None if the protocol has none."""
        return None

    @abstractmethod
    def parse(self, message: Any) -> list[QuoteUpdate]:
        """Decode one JSON message into zero or more quote updates."""


class FinnhubProtocol(StreamProtocol):
    """wss://ws.finnhub.io trade stream.

    Trades carry price and volume only; change fields are left to whoever
    merges the update into a known quote.
    """

    name = "finnhub"
    market_type = MarketType.US

    def __init__(self, api_key: str, base_url: str = "wss://ws.finnhub.io") -> None:
        self._api_key = api_key
        self._base_url = base_url

    def url(self) -> str:
        return f"{self._base_url}?token={self._api_key}"

    def subscribe_frames(self, symbols: list[str]) -> list[dict[str, Any]]:
        return [{"type": "subscribe", "symbol": symbol} for symbol in symbols]

    def unsubscribe_frame(self, symbol: str) -> dict[str, Any] | None:
        return {"type": "unsubscribe", "symbol": symbol}

    def parse(self, message: Any) -> list[QuoteUpdate]:
        if not isinstance(message, dict) or message.get("type") != "trade":
            return []
        return [
            QuoteUpdate(
                symbol=trade["s"],
                market_type=MarketType.US,
                price=float(trade["p"]),
                volume=trade.get("v"),
            )
            for trade in message.get("data") or []
        ]


class BinanceProtocol(StreamProtocol):
    """Binance combined stream of <symbol>usdt@ticker 24h tickers.

    There is no per-symbol unsubscribe; the full set is re-sent on every
    (re)connect.
    """

    name = "binance"
    market_type = MarketType.CRYPTO

    def __init__(self, base_url: str = "wss://stream.binance.com:9443/ws") -> None:
        self._base_url = base_url
        self._ids = itertools.count(1)

    def url(self) -> str:
        return self._base_url

    def subscribe_frames(self, symbols: list[str]) -> list[dict[str, Any]]:
        if not symbols:
            return []
        return [
            {
                "method": "SUBSCRIBE",
                "params": [f"{symbol.lower()}usdt@ticker" for symbol in symbols],
                "id": next(self._ids),
            }
        ]

    def parse(self, message: Any) -> list[QuoteUpdate]:
        if not isinstance(message, dict) or message.get("e") != "24hrTicker":
            return []
        pair = str(message["s"]).upper()
        symbol = pair[: -len("USDT")] if pair.endswith("USDT") else pair
        return [
            QuoteUpdate(
                symbol=symbol,
                market_type=MarketType.CRYPTO,
                price=float(message["c"]),
                change=float(message["p"]),
                change_percent=float(message["P"]),
                volume=float(message["v"]),
                high=float(message["h"]),
                low=float(message["l"]),
                open=float(message["o"]),
                previous_close=float(message["x"]),
            )
        ]


@dataclass
class _Connection:
    """Per-provider connection state.

    disconnected -> connecting -> open -> disconnected (retry) ... and
    `enabled=False` is terminal.
    """

    protocol: StreamProtocol
    enabled: bool = True
    connecting: bool = False
    reconnect_pending: bool = False
    socket: Any = None
    attempts: int = 0

    @property
    def is_open(self) -> bool:
        return self.socket is not None


class SubscriptionManager:
    """Multiplexes per-symbol push subscriptions over one socket per provider.

    Construct one per process and pass it to whoever needs push updates.
    subscribe() and the returned unsubscribe closure are plain functions but
    must be called from inside the running event loop; socket I/O happens on
    background tasks.

    Reconnect policy: after a close, wait base_delay * attempt (attempt
    1..max_attempts) and reconnect. A close with no attempts left disables
    the provider for good, and callers fall back to polling. A successful
    open resets the attempt counter.
    """

    def __init__(
        self,
        finnhub_key: str = "",
        *,
        connector: Connector = default_connector,
        reconnect_base_delay: float = 3.0,
        max_reconnect_attempts: int = 5,
        min_key_length: int = 20,
        protocols: list[StreamProtocol] | None = None,
    ) -> None:
        self._connector = connector
        self._base_delay = reconnect_base_delay
        self._max_attempts = max_reconnect_attempts
        self._subscribers: dict[str, set[QuoteCallback]] = {}
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        if protocols is None:
            protocols = [FinnhubProtocol(finnhub_key), BinanceProtocol()]
        self._connections: dict[str, _Connection] = {p.name: _Connection(p) for p in protocols}
        self._by_market: dict[MarketType, _Connection] = {
            conn.protocol.market_type: conn for conn in self._connections.values()
        }

        finnhub = self._connections.get(FinnhubProtocol.name)
        if finnhub is not None and (
            not finnhub_key or finnhub_key == "demo" or len(finnhub_key) < min_key_length
        ):
            logger.info("Finnhub API key not configured or invalid; US realtime disabled, using polling")
            finnhub.enabled = False

    # --- Public API ---

    def subscribe(
        self,
        symbol: str,
        market_type: MarketType | str,
        callback: QuoteCallback,
    ) -> Callable[[], None]:
        """Register callback for pushes on (market_type, symbol).

        Returns a closure that removes the callback again.
        """
        market_type = MarketType(market_type)
        key = f"{market_type.value}:{symbol}"
        self._subscribers.setdefault(key, set()).add(callback)

        conn = self._by_market.get(market_type)
        if conn is not None:
            if conn.is_open:
                for frame in conn.protocol.subscribe_frames([symbol]):
                    self._send(conn, frame)
            elif conn.enabled and not conn.connecting and not conn.reconnect_pending:
                self._connect(conn)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(key)
            if not callbacks or callback not in callbacks:
                return
            callbacks.discard(callback)
            if callbacks:
                return
            del self._subscribers[key]
            if conn is not None and conn.is_open:
                frame = conn.protocol.unsubscribe_frame(symbol)
                if frame is not None:
                    self._send(conn, frame)

        return unsubscribe

    def is_connected(self, market_type: MarketType | str) -> bool:
        conn = self._by_market.get(MarketType(market_type))
        return conn is not None and conn.is_open and conn.enabled

    def is_enabled(self, market_type: MarketType | str) -> bool:
        conn = self._by_market.get(MarketType(market_type))
        return conn is not None and conn.enabled

    def subscriber_count(self, market_type: MarketType | str, symbol: str) -> int:
        return len(self._subscribers.get(f"{MarketType(market_type).value}:{symbol}", ()))

    async def close(self) -> None:
        """Cancel timers, close sockets and drop every subscription."""
        self._closed = True
        for conn in self._connections.values():
            if conn.socket is not None:
                try:
                    await conn.socket.close()
                except Exception as exc:
                    logger.debug("Error closing %s socket: %s", conn.protocol.name, exc)
                conn.socket = None
            conn.connecting = False
            conn.reconnect_pending = False
        for task in list(self._tasks):
            task.cancel()
        for task in list(self._tasks):
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._subscribers.clear()
        logger.info("Subscription manager closed")

    # --- Connection lifecycle ---

    def _connect(self, conn: _Connection) -> None:
        if self._closed or conn.connecting or conn.is_open or not conn.enabled:
            return
        conn.connecting = True
        self._spawn(self._run(conn), name=f"{conn.protocol.name}-stream")

    async def _run(self, conn: _Connection) -> None:
        name = conn.protocol.name
        try:
            socket = await self._connector(conn.protocol.url())
        except Exception as exc:
            logger.warning("%s WebSocket connection failed (%s); using polling fallback", name, exc)
            conn.connecting = False
            self._handle_close(conn)
            return

        self._handle_open(conn, socket)
        try:
            async for raw in socket:
                self._handle_message(conn, raw)
        except ConnectionClosed as exc:
            logger.warning("%s WebSocket connection issue: %s", name, exc)
        except Exception as exc:
            logger.warning("%s WebSocket error: %s", name, exc)
        finally:
            conn.socket = None
            conn.connecting = False
        self._handle_close(conn)

    def _handle_open(self, conn: _Connection, socket: Any) -> None:
        logger.info("%s WebSocket connected", conn.protocol.name)
        conn.socket = socket
        conn.connecting = False
        conn.attempts = 0

        prefix = f"{conn.protocol.market_type.value}:"
        symbols = [key[len(prefix):] for key in self._subscribers if key.startswith(prefix)]
        for frame in conn.protocol.subscribe_frames(symbols):
            self._send(conn, frame)

    def _handle_message(self, conn: _Connection, raw: Any) -> None:
        try:
            updates = conn.protocol.parse(json.loads(raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Error parsing %s message: %s", conn.protocol.name, exc)
            return
        for update in updates:
            self._dispatch(update)

    def _dispatch(self, update: QuoteUpdate) -> None:
        key = f"{update.market_type.value}:{update.symbol}"
        for callback in list(self._subscribers.get(key, ())):
            try:
                callback(update)
            except Exception:
                logger.exception("Subscriber callback failed for %s", key)

    def _handle_close(self, conn: _Connection) -> None:
        name = conn.protocol.name
        logger.info("%s WebSocket disconnected", name)
        if self._closed or not conn.enabled:
            return
        if conn.attempts >= self._max_attempts:
            logger.info("Max reconnection attempts reached for %s; using polling fallback", name)
            conn.enabled = False
            return

        conn.attempts += 1
        delay = self._base_delay * conn.attempts
        logger.info("Reconnecting %s in %.1fs (attempt %d/%d)", name, delay, conn.attempts, self._max_attempts)
        conn.reconnect_pending = True
        self._spawn(self._reconnect_after(conn, delay), name=f"{name}-reconnect")

    async def _reconnect_after(self, conn: _Connection, delay: float) -> None:
        await asyncio.sleep(delay)
        conn.reconnect_pending = False
        self._connect(conn)

    # --- Background tasks ---

    def _send(self, conn: _Connection, frame: dict[str, Any]) -> None:
        socket = conn.socket
        if socket is None:
            return

        async def send() -> None:
            try:
                await socket.send(json.dumps(frame))
            except Exception as exc:
                logger.warning("Failed to send %s frame: %s", conn.protocol.name, exc)

        self._spawn(send(), name=f"{conn.protocol.name}-send")

    def _spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
