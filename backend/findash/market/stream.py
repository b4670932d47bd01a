"""SSE streaming endpoint for live dashboard quotes."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from .feed import QuoteFeed

logger = logging.getLogger(__name__)


def create_stream_router(feed: QuoteFeed, interval: float = 0.5) -> APIRouter:
    """Create the SSE streaming router with a reference to the quote feed."""
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/quotes")
    async def stream_quotes(request: Request) -> StreamingResponse:
        """SSE endpoint for live quote updates.

        Events look like:

            data: {"us:AAPL": {"symbol": "AAPL", "price": 195.71, ...}, ...}

        and are only sent when the feed's version changed since the last one.
        """
        return StreamingResponse(
            _generate_events(feed, request, interval),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    return router


def snapshot_payload(feed: QuoteFeed) -> str:
    quotes = feed.get_all()
    data = {f"{market.value}:{symbol}": quote.to_dict() for (market, symbol), quote in quotes.items()}
    return json.dumps(data)


async def _generate_events(
    feed: QuoteFeed,
    request: Request,
    interval: float,
) -> AsyncGenerator[str, None]:
    yield "retry: 1000\n\n"

    last_version = -1
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            current_version = feed.version
            if current_version != last_version:
                last_version = current_version
                if feed.get_all():
                    yield f"data: {snapshot_payload(feed)}\n\n"

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
