"""Shared HTTP plumbing for provider adapters."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from ..errors import InvalidSymbol, NetworkFailure, NoData, RateLimited

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
}


def retry_after_seconds(headers: Mapping[str, str] | None) -> float | None:
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    provider: str,
) -> Any:
    """GET url and decode JSON, translating failures into MarketDataError types.

    - transport errors and 5xx      -> NetworkFailure
    - 404                           -> InvalidSymbol
    - 429                           -> RateLimited (with Retry-After)
    - body that is not JSON         -> NoData
    """
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as exc:
        raise NetworkFailure(f"{provider} request failed: {exc}") from exc

    if response.status_code == 404:
        raise InvalidSymbol(f"{provider} returned 404 for {url}")
    if response.status_code == 429:
        raise RateLimited(
            f"{provider} rate limit (HTTP 429)",
            retry_after=retry_after_seconds(response.headers),
        )
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise NetworkFailure(f"{provider} returned HTTP {response.status_code}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise NoData(f"{provider} returned a non-JSON body") from exc
